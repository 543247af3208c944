from catalogcache.context import CatalogContext


def is_privileged_channel_available(context: CatalogContext) -> bool:
    """Whether operations on ``context`` can be served by the local cache."""
    return context.channel is not None and not context.settings.force_remote
