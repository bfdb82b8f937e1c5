"""
Closed value sets shared by the models, the validation rules and the
metadata endpoints.
"""

from enum import Enum


class StrEnum(str, Enum):

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class UserRole(StrEnum):
    MANUFACTURER = "manufacturer"
    BRAND = "brand"
    RETAILER = "retailer"
    ADMIN = "admin"


class UserStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"
    SUSPENDED = "suspended"


class ProductType(StrEnum):
    FOOD = "food"
    BEVERAGE = "beverage"
    HEALTH = "health"
    OTHER = "other"


class FoodType(StrEnum):
    SEASONING = "Seasoning"
    SAUCE = "Sauce"
    SNACK = "Snack"
    BEVERAGE = "Beverage"
    DAIRY = "Dairy"
    BAKERY = "Bakery"
    CONFECTIONERY = "Confectionery"
    FROZEN = "Frozen"
    GRAIN = "Grain"
    PROTEIN = "Protein"
    PRODUCE = "Produce"
    OTHER = "Other"


class PackagingType(StrEnum):
    BOTTLE = "Bottle"
    JAR = "Jar"
    CAN = "Can"
    BOX = "Box"
    BAG = "Bag"
    POUCH = "Pouch"
    SACHET = "Sachet"
    TRAY = "Tray"
    BULK = "Bulk"
    OTHER = "Other"


class UnitType(StrEnum):
    UNITS = "units"
    KG = "kg"
    G = "g"
    LB = "lb"
    OZ = "oz"
    L = "l"
    ML = "ml"
    BOXES = "boxes"
    CASES = "cases"
    PALLETS = "pallets"


class LeadTimeUnit(StrEnum):
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"


class FlavorType(StrEnum):
    SALTY = "salty"
    SWEET = "sweet"
    SPICY = "spicy"
    UMAMI = "umami"
    SOUR = "sour"
    BITTER = "bitter"
    AROMATIC = "aromatic"
    MILD = "mild"
    RICH = "rich"
    COMPLEX = "complex"
    NUTTY = "nutty"
    SAVORY = "savory"
    CREAMY = "creamy"
    TANGY = "tangy"
    CITRUS = "citrus"


class Allergen(StrEnum):
    GLUTEN = "gluten"
    CRUSTACEANS = "crustaceans"
    EGGS = "eggs"
    FISH = "fish"
    PEANUTS = "peanuts"
    SOY = "soy"
    MILK = "milk"
    TREE_NUTS = "tree-nuts"
    CELERY = "celery"
    MUSTARD = "mustard"
    SESAME = "sesame"
    SULPHITES = "sulphites"
    LUPIN = "lupin"
    MOLLUSCS = "molluscs"


class FoodProductStatus(StrEnum):
    AVAILABLE = "available"
    DISCONTINUED = "discontinued"
    PREORDER = "preorder"


class ProjectStatus(StrEnum):
    DRAFT = "draft"
    ACTIVE = "active"
    IN_REVIEW = "in_review"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SelectedProductKind(StrEnum):
    PRODUCT = "PRODUCT"
    CATEGORY = "CATEGORY"
    FOODTYPE = "FOODTYPE"
