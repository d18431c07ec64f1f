import time

HOUR_S = 3600

def now_ts() -> int:
    return int(time.time())

def hours_between(earlier: int, later: int) -> float:
    return (int(later) - int(earlier)) / HOUR_S
