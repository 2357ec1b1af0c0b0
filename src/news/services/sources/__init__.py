from .base import ArticleDraft, SiteProfile
from .cafef import CAFEF_PROFILE

__all__ = ["ArticleDraft", "SiteProfile", "CAFEF_PROFILE"]
