from __future__ import annotations

# VIP classification.
#
# A ticket is VIP when its serial is a multiple of the VIP divisor. The
# divisor never drops below 10, so roughly one ticket in ten is VIP for
# small crowds (with the default crowd of 10 only serial 0 qualifies).

MIN_VIP_DIVISOR = 10


def vip_divisor(population: int) -> int:
    return max(MIN_VIP_DIVISOR, population)


def is_vip(serial: int, *, population: int) -> bool:
    """Return True if `serial` (internal, 0-based) belongs to a VIP.

    Pure and deterministic: the same serial always gives the same answer.
    """
    return serial % vip_divisor(population) == 0
