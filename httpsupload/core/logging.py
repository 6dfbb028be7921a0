"""Logging utilities for httpsupload modules."""

import logging

PACKAGE_LOGGER = 'httpsupload'


def get_logger(name: str) -> logging.Logger:
    """Get an httpsupload logger.

    Records propagate to the root logger, so an application's own
    basicConfig() picks them up. Until the root logger has a handler the
    upload loggers stay quiet below WARNING.

    Args:
        name: Logger name, e.g. 'httpsupload.upload.transmitter'

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    logger.propagate = True

    if not logging.getLogger().handlers:
        logger.setLevel(logging.WARNING)

    return logger


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure logging for httpsupload modules.
    
    Adds a stream handler to the package logger if it has none and sets
    the level on every package logger.
    
    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        PACKAGE_LOGGER,
        f'{PACKAGE_LOGGER}.upload',
        f'{PACKAGE_LOGGER}.upload.plan',
        f'{PACKAGE_LOGGER}.upload.transmitter',
        f'{PACKAGE_LOGGER}.upload.response',
        f'{PACKAGE_LOGGER}.upload.item',
        f'{PACKAGE_LOGGER}.upload.progress',
        f'{PACKAGE_LOGGER}.ssl',
        f'{PACKAGE_LOGGER}.cli',
    ]
    
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        package_logger.addHandler(handler)
    
    for name in loggers:
        logging.getLogger(name).setLevel(level)
