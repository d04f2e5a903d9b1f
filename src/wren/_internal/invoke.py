"""Invoke helpers — call sync or async route functions uniformly.

Handlers, middleware, layouts, app-shells, page components, and error
boundaries can all be ``def`` or ``async def``. Any code that calls a
user-provided route function goes through this one helper so the
sync/async check lives in exactly one place.

Usage::

    from wren._internal.invoke import invoke

    result = await invoke(layout, ctx)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable.

    Works with both sync and async callables::

        # sync: returns immediately
        def page(ctx):
            return "<h1>hello</h1>"

        # async: returns coroutine, awaited automatically
        async def page(ctx):
            data = await fetch_data()
            return f"<h1>{data}</h1>"

    A sync middleware that ends with ``return ctx.next()`` hands back a
    coroutine; it is awaited here as well.
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
