# agricloud/models.py
from sqlalchemy import Column, String, Float, Date, DateTime, Integer, Text, ForeignKey
from datetime import datetime
from .database import Base

class Farm(Base):
    __tablename__ = "farms"
    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    name = Column(String)
    crop = Column(String)
    lat = Column(Float)
    lon = Column(Float)
    size = Column(Float, default=0.0)
    planting_date = Column(Date, nullable=True)
    soil_json = Column(Text, nullable=True)   # SoilSample as JSON, null until enriched
    irrigation_status_json = Column(Text)
    last_updated = Column(DateTime(timezone=True), nullable=True)   # UTC; sqlite drops the offset
    created_at = Column(DateTime, default=datetime.utcnow)

class IrrigationLogRecord(Base):
    __tablename__ = "irrigation_logs"
    id = Column(String, primary_key=True, index=True)
    farm_id = Column(String, ForeignKey("farms.id", ondelete="CASCADE"), index=True)
    seq = Column(Integer)   # insertion order, breaks ties between equal dates
    date = Column(Date, index=True)
    amount_mm = Column(Float)
    source = Column(String)
    created_at = Column(DateTime, default=datetime.utcnow)

class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True, index=True)
    name = Column(String)
    email = Column(String, unique=True, index=True)
    role = Column(String, default="Farmer")
    # thresholds; any null column falls back to the default limit
    temp_max = Column(Float, nullable=True)
    humidity_min = Column(Float, nullable=True)
    moisture_min = Column(Float, nullable=True)
    rain_max = Column(Float, nullable=True)
