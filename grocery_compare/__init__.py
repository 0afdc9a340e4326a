from .compare import compare_products
from .models import ShoppingPlanResult, StoreCart

__version__ = "0.1.0"

__all__ = ["compare_products", "ShoppingPlanResult", "StoreCart", "__version__"]
