"""
promostudio/promotions/models.py
--------------------------------
Promotion catalog storage.

PromotionRecord.params is a JSON-encoded dict whose schema depends on promo_type:
  discount_code → {"type": "percentage", "value": 20, "max_discount": 5}
  bogof         → {"buy_quantity": 2, "get_quantity": 1, "applicable_items": "same",
                   "lowest_priced_free": true}
  bundle        → {"fixed_price": 12.0, "slots": [{"id": "main", "name": "Main",
                   "allowed_item_ids": ["burger"]}]}
  free_delivery → {}

The engine never sees these rows; `to_domain()` turns each one into the
immutable Promotion variant the engine works on.
"""
import json
import uuid
from datetime import datetime, timezone
from typing import List

from promostudio import db
from promostudio.promotions.serializers import MECHANISM_KEYS, promotion_from_dict
from promostudio.promotions.types import DAYS_OF_WEEK, Promotion


def new_promo_id() -> str:
    return f'promo_{uuid.uuid4().hex[:12]}'


class PromotionRecord(db.Model):
    """A configurable promotion rule in the catalog."""
    __tablename__ = 'promotions'

    id            = db.Column(db.String(40),  primary_key=True, default=new_promo_id)
    name          = db.Column(db.String(200), nullable=False)
    promo_type    = db.Column(db.String(30),  nullable=False)   # see PROMO_TYPE_CHOICES
    status        = db.Column(db.String(20),  nullable=False, default='draft')
    priority      = db.Column(db.Integer,     nullable=False, default=0)
    stackable     = db.Column(db.Boolean,     nullable=False, default=False)
    code          = db.Column(db.String(40),  nullable=True, index=True)
    description   = db.Column(db.String(300), nullable=True)
    params        = db.Column(db.Text,        nullable=False, default='{}')   # JSON string

    # Schedule (all NULL = always on while active)
    days_of_week  = db.Column(db.String(40),  nullable=True)    # "mon,tue,wed"
    start_time    = db.Column(db.String(5),   nullable=True)    # "HH:MM"
    end_time      = db.Column(db.String(5),   nullable=True)
    start_date    = db.Column(db.Date,        nullable=True)
    end_date      = db.Column(db.Date,        nullable=True)

    # Basket rules
    min_basket              = db.Column(db.Numeric(12, 2), nullable=True)
    free_delivery_threshold = db.Column(db.Numeric(12, 2), nullable=True)
    eligible_category_ids   = db.Column(db.Text, nullable=False, default='[]')   # JSON list
    eligible_item_ids       = db.Column(db.Text, nullable=False, default='[]')   # JSON list

    created_at    = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    # ── Helpers ───────────────────────────────────────────────────

    @property
    def params_dict(self) -> dict:
        try:
            return json.loads(self.params or '{}')
        except (ValueError, TypeError):
            return {}

    @params_dict.setter
    def params_dict(self, value: dict):
        self.params = json.dumps(value)

    @staticmethod
    def _json_list(raw) -> list:
        try:
            return json.loads(raw or '[]')
        except (ValueError, TypeError):
            return []

    @property
    def has_schedule(self) -> bool:
        return any((self.days_of_week, self.start_time, self.end_time,
                    self.start_date, self.end_date))

    def as_payload(self) -> dict:
        """The row in the JSON payload shape the serializers understand."""
        payload = {
            'id':                      self.id,
            'name':                    self.name,
            'type':                    self.promo_type,
            'status':                  self.status,
            'priority':                self.priority,
            'stackable':               self.stackable,
            'code':                    self.code,
            'description':             self.description,
            'min_basket':              self.min_basket,
            'free_delivery_threshold': self.free_delivery_threshold,
            'eligible_category_ids':   self._json_list(self.eligible_category_ids),
            'eligible_item_ids':       self._json_list(self.eligible_item_ids),
            'schedule':                None,
        }
        if self.has_schedule:
            days = [d for d in (self.days_of_week or '').split(',') if d in DAYS_OF_WEEK]
            payload['schedule'] = {
                'days_of_week': days or None,
                'start_time':   self.start_time,
                'end_time':     self.end_time,
                'start_date':   self.start_date,
                'end_date':     self.end_date,
            }
        key = MECHANISM_KEYS.get(self.promo_type)
        if key:
            payload[key] = self.params_dict
        return payload

    def to_domain(self) -> Promotion:
        return promotion_from_dict(self.as_payload())

    def __repr__(self):
        return f'<PromotionRecord {self.name!r} {self.promo_type} {self.status}>'


# ── Catalog repository ────────────────────────────────────────────

def list_catalog() -> List[Promotion]:
    """Whole catalog as engine values, in creation order."""
    rows = PromotionRecord.query.order_by(PromotionRecord.created_at, PromotionRecord.id).all()
    return [r.to_domain() for r in rows]
