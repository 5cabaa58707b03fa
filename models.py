"""Pydantic models for request/response validation."""
from pydantic import BaseModel, Field
from typing import Optional, Union, Dict, Any, Literal, Annotated


Cart = Dict[str, Any]


# HTTP request bodies

class AddProductRequest(BaseModel):
    """Request body for adding a product to the cart."""
    id: int = Field(..., description="Ecwid product ID")
    quantity: int = Field(1, description="Quantity to add")
    options: Optional[Dict[str, Any]] = Field(None, description="Selected product options")


class RemoveProductRequest(BaseModel):
    """Request body for removing a cart line."""
    index: int = Field(..., description="Position of the item in the cart")


# Storefront actions, tagged by the `action` field

class AddProductAction(BaseModel):
    action: Literal["addProduct"] = "addProduct"
    id: int
    quantity: int = 1
    options: Dict[str, Any] = Field(default_factory=dict)


class GetCartAction(BaseModel):
    action: Literal["getCart"] = "getCart"


class RemoveProductAction(BaseModel):
    action: Literal["removeProduct"] = "removeProduct"
    index: int


class ClearCartAction(BaseModel):
    action: Literal["clearCart"] = "clearCart"


class CheckoutAction(BaseModel):
    action: Literal["checkout"] = "checkout"


StorefrontAction = Annotated[
    Union[AddProductAction, GetCartAction, RemoveProductAction, ClearCartAction, CheckoutAction],
    Field(discriminator="action"),
]


# Action results

class AddProductResult(BaseModel):
    """Outcome of Ecwid.Cart.addProduct as reported by its callback."""
    success: bool
    added_product: Optional[Dict[str, Any]] = Field(None, alias="addedProduct")
    updated_cart: Optional[Cart] = Field(None, alias="updatedCart")

    class Config:
        extra = "allow"
        populate_by_name = True


class RemoveProductResult(BaseModel):
    success: bool = True
    message: str = "Product removed"
    updated_cart: Optional[Cart] = Field(None, alias="updatedCart")

    class Config:
        populate_by_name = True


class ClearCartResult(BaseModel):
    success: bool = True
    message: str = "Cart cleared"


class CheckoutResult(BaseModel):
    success: bool = True
    message: str = "Checkout opened"


ActionResult = Union[Cart, AddProductResult, RemoveProductResult, ClearCartResult, CheckoutResult]
