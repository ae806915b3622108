from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from checkout.utils.validators import digits_only

Cart = Dict[str, int]  # product_id -> qty


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    type: str  # voucher / physical
    price: int
    image: str = ""
    description: str = ""
    original_price: Optional[int] = None


@dataclass(frozen=True)
class FormLabels:
    name: str = "Nama Lengkap"
    name_placeholder: str = "Masukkan nama lengkap"
    email: str = "Email"
    email_placeholder: str = "nama@email.com"
    phone: str = "Nomor WhatsApp"
    phone_placeholder: str = "08xxxxxxxxxx"


@dataclass(frozen=True)
class Messages:
    order_message: str = (
        "Halo, saya ingin memesan:\n\n{orderDetails}\n\nTotal: {total}\n\n"
        "Nama: {name}\nEmail: {email}\nWhatsApp: {phone}"
    )
    checkout_button: str = "Pesan via WhatsApp"
    incomplete_form: str = "Mohon lengkapi semua data yang diperlukan"
    min_purchase: str = "Minimal pembelian {minPurchase} item"
    add_more_hint: str = "Tambah {remaining} item lagi untuk checkout"
    complete_form_hint: str = "Lengkapi semua data untuk melanjutkan ke checkout"


@dataclass(frozen=True)
class StoreConfig:
    name: str
    min_purchase: int
    whatsapp_number: str
    form_labels: FormLabels = field(default_factory=FormLabels)
    messages: Messages = field(default_factory=Messages)


@dataclass(frozen=True)
class Catalog:
    products: Tuple[Product, ...]
    store: StoreConfig

    def get(self, product_id: str) -> Optional[Product]:
        for p in self.products:
            if p.id == product_id:
                return p
        return None


@dataclass
class ContactInfo:
    name: str = ""
    email: str = ""
    phone: str = ""

    def __post_init__(self) -> None:
        self.set_phone(self.phone)

    def set_phone(self, raw: str) -> str:
        # non-digit keystrokes are dropped, never rejected
        self.phone = digits_only(raw)
        return self.phone

    def missing_fields(self) -> list:
        return [k for k in ("name", "email", "phone") if not getattr(self, k)]


@dataclass(frozen=True)
class LineItem:
    product: Product
    qty: int

    @property
    def line_total(self) -> int:
        return self.product.price * self.qty
