import logging
import sys


def setup_logging(
    level: int = logging.INFO,
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
) -> None:
    """Configures basic logging to stdout."""
    logging.basicConfig(level=level, format=format_string, stream=sys.stdout)


# Library code only logs; applications call ``setup_logging`` to see the output.
logger = logging.getLogger("coalgebrax")
logger.addHandler(logging.NullHandler())
