from .content_cache import ArtifactCategory, ContentCache, COMPLETE_ENTRY

__all__ = ["ArtifactCategory", "ContentCache", "COMPLETE_ENTRY"]
