"""
promostudio/promotions/__init__.py
----------------------------------
Promotions blueprint: catalog admin, checkout evaluation, schedule
simulator and conflict review.
URL prefix: /promotions
"""
from flask import Blueprint

promotions = Blueprint('promotions', __name__)

from promostudio.promotions import routes  # noqa: E402, F401
from promostudio.promotions import models  # noqa: E402, F401  (registers PromotionRecord with SQLAlchemy)
