from clipkeep.models.clip_item import ClipContent, ClipItem, ContentKind
from clipkeep.models.view import ClipItemView

__all__ = [
    'ClipContent',
    'ClipItem',
    'ClipItemView',
    'ContentKind',
]
