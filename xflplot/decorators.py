# xflplot/decorators.py
from dataclasses import replace
from functools import wraps
from typing import Any, Callable

from .options import QuantileOptions


def with_options(*keys: str) -> Callable:
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, opts: QuantileOptions | None = None, **kwargs: Any):
            # ------------------------------------------------------
            # 1) pick high-priority kwargs (pop); may be None
            # ------------------------------------------------------
            local = {k: kwargs.pop(k, None) for k in keys}

            # ------------------------------------------------------
            # 2) build / merge options object (never mutate the caller's)
            # ------------------------------------------------------
            if opts is None:
                opts = QuantileOptions.from_kwargs(**kwargs)
            elif kwargs:
                update = QuantileOptions.from_kwargs(**kwargs)
                known = {
                    k: getattr(update, k)
                    for k in kwargs
                    if k in update.__dataclass_fields__ and k != "extra"
                }
                opts = replace(opts, **known, extra={**opts.extra, **update.extra})

            # ------------------------------------------------------
            # 3) call the original function
            # ------------------------------------------------------
            return func(*args, opts=opts, local=local)

        return wrapper

    return decorator
