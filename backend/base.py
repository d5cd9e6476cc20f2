from datetime import datetime
from sqlalchemy.orm import declarative_base


def _camel(name):
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class DictMixin:
    """
    Mixin providing the camelCase dictionary serialization the storefront
    client reads off the wire.
    """
    def to_dict(self):
        result = {}
        for c in self.__table__.columns:
            value = getattr(self, c.key)
            if isinstance(value, datetime):
                value = value.isoformat()
            result[_camel(c.key)] = value
        return result

Base = declarative_base(cls=DictMixin)
