from colorama import Fore, Style
from colorama import just_fix_windows_console

from config import color_enabled

GREEN = Fore.GREEN
RED = Fore.RED
CYAN = Fore.CYAN
YELLOW = Fore.YELLOW


def init_console():
    just_fix_windows_console()


def paint(value, color: str) -> str:
    text = str(value)
    if not color_enabled():
        return text
    return f"{color}{text}{Style.RESET_ALL}"
