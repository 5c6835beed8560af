from pdir.models.base import Base
from pdir.models.blog import Blog
from pdir.models.category import Category
from pdir.models.prompt import Favorite, Prompt
from pdir.models.user import User

__all__ = ["Base", "Blog", "Category", "Favorite", "Prompt", "User"]
