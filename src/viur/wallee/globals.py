import logging

WALLEE_LOGGER: logging.Logger = logging.getLogger("viur.wallee")
"""viur-wallee base logger instance"""

if WALLEE_LOGGER.level == logging.NOTSET:
    # By default, if not explicitly set before by the application, we set the logging level to INFO
    WALLEE_LOGGER.setLevel(logging.INFO)
