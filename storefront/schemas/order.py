"""
Pydantic schemas for order request/response validation
"""
from pydantic import BaseModel, Field, EmailStr, ConfigDict
from typing import List, Optional, Literal
from datetime import datetime


OrderStatus = Literal['pending', 'processing', 'shipped', 'delivered', 'cancelled', 'refunded']


class OrderItemCreate(BaseModel):
    """One line of a new order"""
    product_id: int = Field(..., gt=0, description="Product ID")
    product_name: str = Field(..., min_length=1, max_length=255, description="Product name at order time")
    size: Optional[str] = Field(None, max_length=50, description="Size, defaults to 'One Size'")
    color: Optional[str] = Field(None, max_length=50, description="Color, defaults to 'Default'")
    quantity: int = Field(..., gt=0, description="Quantity to order")
    unit_price: float = Field(..., ge=0, description="Unit price at order time")


class OrderCreate(BaseModel):
    """Schema for creating a new order"""
    # Emptiness is checked by the service so it surfaces as a ValidationError
    items: List[OrderItemCreate] = Field(..., description="Order lines")
    payment_method: str = Field(..., min_length=1, max_length=50, description="Payment method")
    subtotal: float = Field(0, ge=0)
    shipping_amount: float = Field(0, ge=0)
    total_amount: float = Field(0, ge=0)
    customer_email: Optional[EmailStr] = Field(None, description="Customer email address")


class OrderStatusUpdate(BaseModel):
    """Schema for the admin status update"""
    # Plain str: unrecognized values are rejected by the lifecycle, not the parser
    status: str = Field(..., description="Requested order status")
    tracking_number: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class OrderItemResponse(BaseModel):
    """Schema for an order line in responses"""
    id: int
    product_id: int
    product_name: str
    size: Optional[str]
    color: Optional[str]
    quantity: int
    unit_price: float
    total_price: float

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Schema for order response"""
    id: int
    order_number: str
    user_id: int
    customer_email: Optional[str]
    status: OrderStatus
    payment_status: str
    payment_method: str
    subtotal: float
    shipping_amount: float
    total_amount: float
    tracking_number: Optional[str]
    notes: Optional[str]
    shipped_at: Optional[datetime]
    delivered_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemResponse]

    model_config = ConfigDict(from_attributes=True)


class OrderListResponse(BaseModel):
    """Schema for list of orders response"""
    orders: list[OrderResponse]
    total: int
