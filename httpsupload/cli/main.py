"""httpsupload CLI - Upload command."""
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn

from ..core.config import ProxyConfig, SSLConfig, TimeoutConfig, UploaderConfig
from ..core.exceptions import HttpsUploadError, CertificateValidationError
from ..core.logging import setup_logging
from ..core.upload import HttpsFileUploader, UploadItem
from ..core.utils import format_size

app = typer.Typer(
    name="httpsupload",
    help="Upload files to an HTTP(S) endpoint as multipart/form-data",
    add_completion=False
)
console = Console()

STDIN_ARGUMENT = '-'


class RichProgressObserver:
    """Shows one progress bar per uploaded item."""
    
    def __init__(self, progress: Progress):
        self._progress = progress
        self._task = None
        self._stream_count = 0
    
    def upload_start(self, item_count: int, total_bytes: int) -> None:
        console.print(f"Uploading {item_count} item(s), {format_size(total_bytes)}")
    
    def upload_progress(self, file: Optional[Path], total_size: Optional[int], pct: int) -> None:
        if pct == 0 or self._task is None:
            if file is not None:
                description = file.name
            else:
                self._stream_count += 1
                description = f"stream #{self._stream_count}"
            self._task = self._progress.add_task(description, total=100)
        self._progress.update(self._task, completed=pct)
    
    def upload_end(self, bytes_sent: int, elapsed_ms: int) -> None:
        console.print(f"Sent {format_size(bytes_sent)} in {elapsed_ms / 1000:.1f}s")


def parse_field(value: str) -> Tuple[str, str]:
    """Parse a 'name=value' form field."""
    name, sep, field_value = value.partition('=')
    if not sep or not name:
        raise typer.BadParameter(f"Expected name=value, got {value!r}")
    return name, field_value


def parse_header(value: str) -> Tuple[str, str]:
    """Parse a 'Name: value' header."""
    name, sep, header_value = value.partition(':')
    if not sep or not name.strip():
        raise typer.BadParameter(f"Expected 'Name: value', got {value!r}")
    return name.strip(), header_value.strip()


def parse_proxy(value: str) -> ProxyConfig:
    """Parse a 'host[:port]' proxy address."""
    host, sep, port = value.rpartition(':')
    if not sep:
        return ProxyConfig(host=value)
    try:
        return ProxyConfig(host=host, port=int(port))
    except ValueError:
        raise typer.BadParameter(f"Invalid proxy port in {value!r}")


def build_items(files: List[str], form_field_name: str, stdin_name: str) -> List[UploadItem]:
    items = []
    for file in files:
        if file == STDIN_ARGUMENT:
            items.append(UploadItem.from_stream(
                sys.stdin.buffer, stdin_name, form_field_name=form_field_name
            ))
            continue
        path = Path(file)
        if not path.is_file():
            raise typer.BadParameter(f"Not a file: {file}")
        items.append(UploadItem.from_file(path, form_field_name=form_field_name))
    return items


@app.command()
def upload(
    url: str = typer.Argument(..., help="Endpoint URL"),
    files: List[str] = typer.Argument(..., help="Files to upload, '-' for standard input"),
    field: Optional[List[str]] = typer.Option(None, "--field", "-F", help="Form field as name=value"),
    form_field_name: str = typer.Option("file", "--name", "-n", help="Form field name of the files"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Basic auth username"),
    password: Optional[str] = typer.Option(None, "--password", "-p", help="Basic auth password"),
    insecure: bool = typer.Option(False, "--insecure", "-k", help="Do not validate certificates"),
    accept_issuer: Optional[List[str]] = typer.Option(
        None, "--accept-issuer", help="With --insecure, only accept this issuer Organization"
    ),
    proxy: Optional[str] = typer.Option(None, "--proxy", help="HTTP proxy as host[:port]"),
    header: Optional[List[str]] = typer.Option(None, "--header", "-H", help="Extra header 'Name: value'"),
    connect_timeout: float = typer.Option(10.0, "--connect-timeout", help="Connect timeout in seconds"),
    read_timeout: float = typer.Option(5.0, "--read-timeout", help="Read timeout in seconds"),
    stdin_name: str = typer.Option("stdin", "--stdin-name", help="File name announced for standard input"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Upload files (and form fields) in a single multipart/form-data POST."""
    if verbose:
        setup_logging(logging.DEBUG)
    
    if accept_issuer and not insecure:
        raise typer.BadParameter("--accept-issuer requires --insecure")
    
    if user and password is None:
        password = typer.prompt("Password", hide_input=True)
    
    fields: Dict[str, str] = dict(parse_field(f) for f in field or [])
    headers: Dict[str, str] = dict(parse_header(h) for h in header or [])
    items = build_items(files, form_field_name, stdin_name)
    
    config = UploaderConfig(
        url=url,
        username=user,
        password=password,
        proxy=parse_proxy(proxy) if proxy else None,
        ssl=SSLConfig(verify=not insecure, accepted_issuers=accept_issuer or None),
        timeout=TimeoutConfig(connect=connect_timeout, read=read_timeout),
        additional_headers=headers
    )
    uploader = HttpsFileUploader(config)
    
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console
        ) as progress:
            result = uploader.upload_sync(items, fields, RichProgressObserver(progress))
    except CertificateValidationError as e:
        console.print(f"[red]Certificate rejected: {e}[/red]")
        raise typer.Exit(2)
    except HttpsUploadError as e:
        console.print(f"[red]Upload failed: {e}[/red]")
        raise typer.Exit(2)
    
    if result.is_error:
        console.print(f"[red]Error uploading, HTTP status {result.status_text}[/red]")
    else:
        console.print(f"[green]Upload successful ({result.status_text})[/green]")
    
    if result.response_text:
        console.print(result.response_text_no_html, markup=False, highlight=False)
    
    if result.is_error:
        raise typer.Exit(1)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
