"""
Raw sysctl access through libc.

BSD-family kernels (FreeBSD, macOS, NetBSD, DragonFly) expose kernel state
such as ``kern.boottime`` via ``sysctlbyname(3)``, which returns the raw
bytes of a C structure. Decoding is left to the caller.
"""

import ctypes
import ctypes.util
import errno
import os
from functools import lru_cache


@lru_cache(maxsize=1)
def _libc() -> ctypes.CDLL:
    return ctypes.CDLL(ctypes.util.find_library("c"), use_errno=True)


@lru_cache(maxsize=1)
def _sysctlbyname():
    try:
        func = _libc().sysctlbyname
    except (OSError, AttributeError):
        return None

    func.argtypes = [
        ctypes.c_char_p,
        ctypes.c_void_p,
        ctypes.POINTER(ctypes.c_size_t),
        ctypes.c_void_p,
        ctypes.c_size_t,
    ]
    func.restype = ctypes.c_int
    return func


def has_sysctl() -> bool:
    """Check whether libc provides sysctlbyname."""
    return _sysctlbyname() is not None


def sysctl_raw(name: str) -> bytes:
    """
    Query a sysctl by name and return its raw value.

    Args:
        name: MIB name, e.g. "kern.boottime"

    Returns:
        Value bytes exactly as the kernel wrote them

    Raises:
        OSError: If sysctl is unsupported or the query fails
    """
    func = _sysctlbyname()
    if func is None:
        raise OSError(errno.ENOTSUP, "sysctlbyname is not available on this platform", name)

    key = name.encode()
    size = ctypes.c_size_t(0)

    # First call reports the required buffer size
    if func(key, None, ctypes.byref(size), None, 0) != 0:
        err = ctypes.get_errno()
        raise OSError(err, os.strerror(err), name)

    buf = ctypes.create_string_buffer(size.value)
    if func(key, buf, ctypes.byref(size), None, 0) != 0:
        err = ctypes.get_errno()
        raise OSError(err, os.strerror(err), name)

    return buf.raw[: size.value]
