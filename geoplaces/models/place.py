# geoplaces/models/place.py
from sqlalchemy import Column, Integer, String
from geoalchemy2 import Geometry

from geoplaces import config
from geoplaces.db_base import Base


class Place(Base):
    __tablename__ = "places"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=True)
    # Any of the seven kinds, one SRID for the whole column
    location = Column(
        Geometry("GEOMETRY", srid=config.PLACES_SRID, spatial_index=True),
        nullable=True
    )
