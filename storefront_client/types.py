"""
Data structures passed between the request pipeline and its callers.

This module defines the immutable containers for issued credentials,
account identity, normalized responses and errors, and the tagged
variant produced when inspecting a response for the backend envelope.
"""

from storefront_client.compat import Any, Dict, List, Tuple, Union, Mapping, Optional, NamedTuple


def as_user_id(value: Any) -> Union[int, str]:
    """
    Account ids are integers for customers; some identity providers issue
    opaque string ids, which are kept as they are.
    """
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return str(value)


class UserIdentity(NamedTuple):
    """
    Non-sensitive account identity of the signed-in customer.

    This is the only piece of authentication state that may be persisted
    client-side; it never carries the raw credential.
    """

    id: Union[int, str]
    username: str = ""
    email: str = ""
    name: str = ""
    mobile_number: str = ""
    roles: Tuple[str, ...] = ("ROLE_USER",)
    address: Optional[Dict[str, Any]] = None

    @property
    def is_admin(self) -> bool:
        return "ROLE_ADMIN" in self.roles

    def to_dict(self) -> Dict[str, Any]:
        data = self._asdict()
        data["roles"] = list(self.roles)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserIdentity":
        return cls(
            id=as_user_id(data.get("id")),
            username=data.get("username") or "",
            email=data.get("email") or "",
            name=data.get("name") or "",
            mobile_number=data.get("mobile_number") or "",
            roles=tuple(data.get("roles") or ("ROLE_USER",)),
            address=data.get("address"),
        )


class AuthState(NamedTuple):
    """
    The current credential and the identity it was issued for.

    Replaced as a whole on every change so readers never observe a token
    paired with another account's identity.
    """

    access_token: Optional[str]
    user: Optional[UserIdentity]


class IssuedCredential(NamedTuple):
    """
    Container for a credential returned by the login or refresh endpoints.
    """

    access_token: str
    user: Optional[UserIdentity]
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    message: str = ""


class RequestDescriptor(NamedTuple):
    """
    Everything needed to (re)build one outbound request.

    ``retried`` is set on the single replay allowed after a credential
    refresh.
    """

    method: str
    path: str
    json: Any = None
    params: Optional[Mapping[str, Any]] = None
    headers: Optional[Mapping[str, str]] = None
    retried: bool = False


class ApiResponse(NamedTuple):
    status: int
    data: Any
    headers: Mapping[str, str]


class ErrorInfo(NamedTuple):
    """
    Normalized failure description handed to the UI layer.

    Attributes:
        message: Human readable summary.
        errors: Optional field-level validation messages keyed by field name.
        status: HTTP status, or None for transport failures.
    """

    message: str
    errors: Optional[Dict[str, str]] = None
    status: Optional[int] = None


class Envelope(NamedTuple):
    data: Any
    status: Any = None
    message: Optional[str] = None


class Raw(NamedTuple):
    payload: Any


class Page(NamedTuple):
    """
    One page of a paginated listing.
    """

    content: List[Any]
    total_elements: int = 0
    total_pages: int = 0
    size: int = 0
    number: int = 0
    first: bool = True
    last: bool = True

    @property
    def empty(self) -> bool:
        return not self.content

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Page":
        content = list(data.get("content") or [])
        return cls(
            content=content,
            total_elements=int(data.get("totalElements") or len(content)),
            total_pages=int(data.get("totalPages") or 0),
            size=int(data.get("size") or 0),
            number=int(data.get("number") or 0),
            first=bool(data.get("first", True)),
            last=bool(data.get("last", True)),
        )


class OrderStats(NamedTuple):
    total_orders: int = 0
    total_revenue: float = 0.0
    pending_orders: int = 0
    delivered_orders: int = 0


class PaymentIntent(NamedTuple):
    payment_intent_id: str
    client_secret: str


class CardPaymentResult(NamedTuple):
    """
    Outcome reported by the card payment provider for one confirmation.
    """

    status: Optional[str]
    payment_intent_id: Optional[str] = None
    error: Optional[str] = None


class CheckoutResult(NamedTuple):
    success: bool
    order_id: Optional[int] = None
    payment_intent_id: Optional[str] = None
    error: Optional[str] = None


class ContactInfo(NamedTuple):
    phone: str
    email: str
    address: str


class ContactSubmitResult(NamedTuple):
    success: bool
    contact_id: Optional[int] = None
    error: Optional[str] = None
    validation_errors: Optional[Dict[str, str]] = None


class ContactMessage(NamedTuple):
    """
    A message left through the contact form, as seen by administrators.
    """

    contact_id: Optional[int]
    name: str = ""
    email: str = ""
    mobile_number: str = ""
    message: str = ""
    status: Optional[str] = None
    created_at: Optional[str] = None
    created_by: Optional[str] = None
    updated_at: Optional[str] = None
    updated_by: Optional[str] = None


class CartItem(NamedTuple):
    product_id: int
    quantity: int
    price: float
    name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"productId": self.product_id, "quantity": self.quantity, "price": self.price}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CartItem":
        return cls(
            product_id=int(data.get("productId") or data.get("product_id") or 0),
            quantity=int(data.get("quantity") or 0),
            price=float(data.get("price") or 0),
            name=data.get("name") or "",
        )


class Profile(NamedTuple):
    name: str = ""
    email: str = ""
    mobile_number: str = ""
    address: Optional[Dict[str, str]] = None
    email_updated: bool = False
