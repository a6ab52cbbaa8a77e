import math


def round_half_up(x: float) -> int:
    """Rounds to the nearest integer, halves away from zero

    The builtin round() rounds halves to even which would size 2 x 512.5 GiB
    disks down to 512 GiB but 2 x 513.5 GiB up to 514 GiB.
    """
    return int(math.floor(x + 0.5))


def ceil_div(x: float, n: int) -> int:
    return int(math.ceil(x / n))
