class ListResponseMixin:
    """Adds ``list_response`` wrapping ``list`` results as ``{items, count}``."""

    @classmethod
    async def list_response(cls, *args, **kwargs) -> dict:
        items = await cls.list(*args, **kwargs)
        return {"items": items, "count": len(items)}
