from models.users import User
from models.sessions import UserSession
from models.products import Product, FoodProduct, get_product_model
from models.manufacturers import Manufacturer
from models.projects import Project, ProjectEvent

__all__ = ["User", "UserSession", "Product", "FoodProduct", "Manufacturer", "Project", "ProjectEvent",
           "get_product_model"]
