"""
Per-clinic cache for dashboard rollups.

Each clinic has a version counter; cached rollups are keyed by it, so
bumping the version makes every earlier entry unreachable at once.
"""
from django.conf import settings
from django.core.cache import cache


def _version_key(clinic_id):
    return f'dashboard_{clinic_id}_version'


def clinic_version(clinic_id) -> int:
    version = cache.get(_version_key(clinic_id))
    if version is None:
        version = 1
        cache.add(_version_key(clinic_id), version, timeout=None)
    return version


def invalidate_clinic(clinic_id):
    """Drop every cached rollup of ``clinic_id``."""
    if clinic_id is None:
        return
    try:
        cache.incr(_version_key(clinic_id))
    except ValueError:
        # No version stored yet, nothing cached under the default one either
        cache.set(_version_key(clinic_id), 2, timeout=None)


def cached(clinic_id, name, compute, *params):
    """
    Return the cached value of rollup ``name`` for ``clinic_id``, computing
    and storing it on a miss.
    """
    suffix = '_'.join(str(p) for p in params)
    key = f'dashboard_{clinic_id}_v{clinic_version(clinic_id)}_{name}_{suffix}'
    value = cache.get(key)
    if value is None:
        value = compute()
        cache.set(key, value, timeout=settings.DASHBOARD_CACHE_TIMEOUT)
    return value
