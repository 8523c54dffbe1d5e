from .vocabulary import TagVocabulary, build_palette

__all__ = ["TagVocabulary", "build_palette"]
