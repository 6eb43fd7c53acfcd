"""ComboOffer aggregate: a fixed-price bundle of catalogue products."""

import json

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Decimal, String, Text

from storefront.catalogue.events import ComboOfferCreated, ComboOfferDeactivated
from storefront.domain import storefront
from storefront.pricing.money import optional_money, to_money
from storefront.utils.dates import utcnow, within_window


@storefront.aggregate
class ComboOffer:
    name: String(required=True, max_length=255)
    description: Text()
    product_ids: Text(required=True)  # JSON list of product ids
    original_price: Decimal(min_value=0)
    combo_price: Decimal(required=True, min_value=0)
    image_url: String(max_length=1024)
    starts_at: DateTime()
    ends_at: DateTime()
    is_active: Boolean(default=True)
    created_at: DateTime()

    @invariant.post
    def must_bundle_at_least_one_product(self):
        if not self.product_id_list:
            raise ValidationError({"product_ids": ["A combo offer must include at least one product"]})

    @classmethod
    def create(
        cls,
        name,
        product_ids,
        combo_price,
        original_price=None,
        description=None,
        image_url=None,
        starts_at=None,
        ends_at=None,
    ):
        unique_ids = list(dict.fromkeys(str(pid) for pid in product_ids))
        combo = cls(
            name=name,
            description=description,
            product_ids=json.dumps(unique_ids),
            original_price=optional_money(original_price),
            combo_price=to_money(combo_price),
            image_url=image_url,
            starts_at=starts_at,
            ends_at=ends_at,
            created_at=utcnow(),
        )
        combo.raise_(
            ComboOfferCreated(
                combo_offer_id=str(combo.id),
                name=name,
                product_ids=combo.product_ids,
                combo_price=combo.combo_price,
                is_active=True,
            )
        )
        return combo

    @property
    def product_id_list(self):
        return json.loads(self.product_ids) if self.product_ids else []

    def includes(self, product_id):
        return str(product_id) in self.product_id_list

    def is_available(self, at=None):
        """Active and inside its optional validity window."""
        return bool(self.is_active) and within_window(at or utcnow(), self.starts_at, self.ends_at)

    def deactivate(self):
        if not self.is_active:
            return
        self.is_active = False
        self.raise_(ComboOfferDeactivated(combo_offer_id=str(self.id)))
