from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

# Named constraints for the catalog tables
metadata = MetaData(naming_convention={
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
})

sqla_db = SQLAlchemy(metadata=metadata)

class BaseModel(sqla_db.Model):
    __abstract__ = True
