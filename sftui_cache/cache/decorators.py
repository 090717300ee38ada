#!/usr/bin/env python3
"""
Cache Decorators

- command_cache: memoize any result-producing function (sync or async) in a
  CacheService, keyed by the function's qualified name and its arguments.

Values coming back from the disk tier are the decoded JSON documents, so
decorated functions should return JSON-compatible data or the service should
be built with a matching codec.
"""

import functools
import inspect
from typing import Any, Callable, Iterable, Optional

from .keys import command_prefix, generate_key
from .service import CacheService


def _default_key_parts(args: tuple, kwargs: dict) -> list:
    parts = [repr(arg) for arg in args]
    parts.extend(f"{name}={value!r}" for name, value in sorted(kwargs.items()))
    return parts


def command_cache(
    cache: CacheService,
    key_prefix: Optional[str] = None,
    key_generator: Optional[Callable[..., str]] = None,
    condition: Optional[Callable[[Any], bool]] = None,
    skip_cache_arg: str = "skip_cache",
    tags: Iterable[str] = (),
):
    """
    Cache decorator bound to an explicit CacheService.

    Args:
        cache: Cache instance to read from and populate
        key_prefix: Command id used in keys; defaults to module.qualname
        key_generator: Custom function building the cache key from args/kwargs;
            cache_clear only reaches keys that start with command_prefix(key_prefix)
        condition: Function deciding whether a result should be cached
        skip_cache_arg: Keyword argument that bypasses the cache (removed from kwargs)
        tags: Tags stored with every cached result

    Examples:
        @command_cache(cache, condition=lambda orgs: bool(orgs))
        def list_orgs(alias=None): ...

        @command_cache(cache, key_prefix="sf:org:display")
        async def display_org(target_org): ...
    """
    tags = tuple(tags)

    def decorator(func: Callable) -> Callable:
        func_prefix = key_prefix or f"{func.__module__}.{func.__qualname__}"

        def make_key(*args, **kwargs) -> str:
            if key_generator:
                return key_generator(*args, **kwargs)
            return generate_key(func_prefix, _default_key_parts(args, kwargs))

        def store(cache_key: str, result: Any) -> None:
            if result is not None and (condition is None or condition(result)):
                cache.set(cache_key, result, tags=tags)

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def wrapper(*args, **kwargs):
                if kwargs.pop(skip_cache_arg, False):
                    return await func(*args, **kwargs)

                cache_key = make_key(*args, **kwargs)
                cached_result = cache.get(cache_key)
                if cached_result is not None:
                    return cached_result

                result = await func(*args, **kwargs)
                store(cache_key, result)
                return result

        else:

            @functools.wraps(func)
            def wrapper(*args, **kwargs):
                if kwargs.pop(skip_cache_arg, False):
                    return func(*args, **kwargs)

                cache_key = make_key(*args, **kwargs)
                cached_result = cache.get(cache_key)
                if cached_result is not None:
                    return cached_result

                result = func(*args, **kwargs)
                store(cache_key, result)
                return result

        # Cache control helpers
        wrapper.cache_key = make_key
        wrapper.cache_clear = lambda: cache.invalidate(command_prefix(func_prefix))
        wrapper.cache_delete = lambda *args, **kwargs: cache.delete(
            make_key(*args, **kwargs)
        )
        wrapper.cache_stats = cache.get_stats

        return wrapper

    return decorator
