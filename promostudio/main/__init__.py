from flask import Blueprint

main = Blueprint('main', __name__)

from promostudio.main import routes  # noqa: F401, E402
