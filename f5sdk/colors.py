"""
Color utilities for console log output
"""

import logging


class Colors:
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    CYAN = '\033[96m'
    MAGENTA = '\033[95m'
    ENDC = '\033[0m'  # End color

    LEVELS = {
        logging.DEBUG: CYAN,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: MAGENTA,
    }

    @staticmethod
    def for_level(levelno, text):
        """Wrap text in the color assigned to a logging level"""
        color = Colors.LEVELS.get(levelno)
        if not color:
            return text
        return f"{color}{text}{Colors.ENDC}"
