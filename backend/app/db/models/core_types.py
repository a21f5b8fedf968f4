import enum

class Role(str, enum.Enum):
    kasir = "Kasir"
    barista = "Barista"
    manager = "Manager"
    pengadaan = "Pengadaan"

class UserStatus(str, enum.Enum):
    aktif = "Aktif"
    nonaktif = "Nonaktif"

class ProductCategory(str, enum.Enum):
    kopi = "Kopi"
    non_kopi = "Non-Kopi"
    makanan = "Makanan"

class MaterialUnit(str, enum.Enum):
    kg = "kg"
    liter = "liter"
    pcs = "pcs"
    gram = "gram"
    ml = "ml"

# Jamais persisté : toujours dérivé de (stock, min_stock)
class MaterialStatus(str, enum.Enum):
    aman = "Aman"
    stok_rendah = "Stok Rendah"

class FulfillmentStatus(str, enum.Enum):
    waiting = "waiting"
    processing = "processing"
    ready = "ready"
    completed = "completed"

class ProcurementStatus(str, enum.Enum):
    pending = "Pending"
    dikirim = "Dikirim"
    diterima = "Diterima"

# Ordre du cycle de vie : un statut ne revient jamais en arrière
FULFILLMENT_FLOW = [
    FulfillmentStatus.waiting,
    FulfillmentStatus.processing,
    FulfillmentStatus.ready,
    FulfillmentStatus.completed,
]

PROCUREMENT_FLOW = [
    ProcurementStatus.pending,
    ProcurementStatus.dikirim,
    ProcurementStatus.diterima,
]
