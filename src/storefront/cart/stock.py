"""Advisory stock validation for cart lines.

Stock is read, never reserved: a check passes when the catalogue shows
enough units at the moment of the call. Products that allow backorders are
never out of stock.
"""

from storefront.catalogue.lookup import CatalogueLookup
from storefront.errors import OutOfStockError


def ensure_in_stock(lookup: CatalogueLookup, product_id, quantity, variant_id=None, combo_offer_id=None):
    """Raise ``OutOfStockError`` unless ``quantity`` units can be sold.

    Variant lines use the variant's stock override when it has one. A combo
    line needs ``quantity`` units of every product in the bundle.
    """
    if combo_offer_id:
        combo = lookup.combo_offer(combo_offer_id)
        product_ids = combo.product_ids
    else:
        product_ids = (str(product_id),)

    for pid in product_ids:
        item = lookup.product(pid)
        if item.allow_backorder:
            continue
        variant = lookup.variant(pid, variant_id) if variant_id and pid == str(product_id) else None
        available = item.available_stock(variant)
        if quantity > available:
            raise OutOfStockError(pid, requested=quantity, available=available)
