import logging

FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

def setup_logging(level: str = "INFO") -> logging.Logger:
    logging.basicConfig(level=level.upper(), format=FORMAT)
    return logging.getLogger("fileshare")

def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"fileshare.{name}")
