"""
SQLAlchemy database models.

This module contains all the database table definitions using SQLAlchemy ORM.
The tables are read and written through the Query Executor with plain SQL;
the models own the schema for ``create_all`` and Alembic.
"""

from enum import Enum

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class UserRole(str, Enum):
    """User roles enumeration."""

    AGENT = "Agent"
    ADMIN = "Admin"
    SUPERVISEUR = "Superviseur"


class Gender(str, Enum):
    """Pilgrim sex as stored in ``pelerins.sexe``."""

    MALE = "M"
    FEMALE = "F"


class VoyageName(str, Enum):
    """Yearly campaign names."""

    HAJJ = "HAJJ"
    OUMRAH = "OUMRAH"


class ChatChannel(str, Enum):
    """Fixed chat topics."""

    INTRA = "intra"
    ENCADREURS = "encadreurs"


class User(Base):
    """Back-office account."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    email = Column(String(160), unique=True, nullable=False, index=True)
    password_hash = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.AGENT.value)
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


class Pelerin(Base):
    """
    Pilgrim record.

    ``num_passeport`` is the informal join key shared with medical records,
    payments and installments. It is indexed but not unique.
    """

    __tablename__ = "pelerins"

    id = Column(Integer, primary_key=True, index=True)
    photo_pelerin_path = Column(String(512), nullable=True)
    photo_passeport_path = Column(String(512), nullable=True)
    nom = Column(String(120), nullable=False)
    prenoms = Column(String(160), nullable=False)
    date_naissance = Column(Date, nullable=False)
    lieu_naissance = Column(String(160), nullable=True)
    sexe = Column(String(1), nullable=False)
    adresse = Column(String(255), nullable=True)
    contact = Column(String(60), nullable=False)
    num_passeport = Column(String(20), nullable=False, index=True)
    offre = Column(String(160), nullable=True)
    voyage = Column(String(20), nullable=True)
    annee_voyage = Column(Integer, nullable=False)

    # Emergency contact
    ur_nom = Column(String(120), nullable=True)
    ur_prenoms = Column(String(160), nullable=True)
    ur_contact = Column(String(60), nullable=True)
    ur_residence = Column(String(255), nullable=True)

    created_by_name = Column(String(120), nullable=True)
    created_by_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    __table_args__ = (Index("idx_pelerins_name", "nom", "prenoms"),)


class Medicale(Base):
    """Medical form, linked to a pilgrim by passport on a best-effort basis."""

    __tablename__ = "medicales"

    id = Column(Integer, primary_key=True, index=True)
    numero_cmah = Column(String(60), nullable=True)
    passeport = Column(String(20), nullable=False, index=True)
    nom = Column(String(120), nullable=True)
    prenoms = Column(String(160), nullable=True)
    pouls = Column(String(30), nullable=True)
    carnet_vaccins = Column(String(60), nullable=True)
    groupe_sanguin = Column(String(10), nullable=True)
    covid = Column(String(60), nullable=True)
    poids = Column(String(30), nullable=True)
    tension = Column(String(30), nullable=True)
    vulnerabilite = Column(String(255), nullable=True)
    diabete = Column(String(60), nullable=True)
    maladie_cardiaque = Column(String(60), nullable=True)
    analyse_psychiatrique = Column(String(255), nullable=True)
    accompagnements = Column(String(255), nullable=True)
    examen_paraclinique = Column(Text, nullable=True)
    antecedents = Column(Text, nullable=True)
    pelerin_id = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())


class Flight(Base):
    """Flight leg with its passengers."""

    __tablename__ = "flights"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(20), nullable=False)
    company = Column(String(120), nullable=False)
    from_code = Column(String(3), nullable=False)
    from_date = Column(DateTime, nullable=False)
    to_code = Column(String(3), nullable=False)
    to_date = Column(DateTime, nullable=False)
    duration = Column(String(40), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())


class Passenger(Base):
    """
    Passenger seated on a flight.

    ``seat`` is stored upper-cased and NULL when unassigned, so the
    ``(flight_id, seat)`` constraint only applies to real seats.
    """

    __tablename__ = "passengers"

    id = Column(Integer, primary_key=True, index=True)
    fullname = Column(String(200), nullable=False)
    seat = Column(String(10), nullable=True)
    passport = Column(String(20), nullable=True, index=True)
    photo_url = Column(String(512), nullable=True)
    flight_id = Column(Integer, ForeignKey("flights.id"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    __table_args__ = (UniqueConstraint("flight_id", "seat", name="unique_seat_per_flight"),)


class Room(Base):
    """Hotel room."""

    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    hotel = Column(String(160), nullable=False)
    city = Column(String(120), nullable=False)
    type = Column(String(40), nullable=False, default="double")
    capacity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())


class RoomOccupant(Base):
    """Person assigned to a room."""

    __tablename__ = "room_occupants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    passport = Column(String(20), nullable=True, index=True)
    photo_url = Column(String(512), nullable=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())


class Payment(Base):
    """Payment received from a pilgrim."""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    ref = Column(String(20), unique=True, nullable=False)
    passeport = Column(String(20), nullable=False, index=True)
    nom = Column(String(120), nullable=False)
    prenoms = Column(String(160), nullable=True)
    mode = Column(String(40), nullable=False, default="Espèces")
    montant = Column(Float, nullable=False, default=0)
    total_du = Column(Float, nullable=False, default=0)
    reduction = Column(Float, nullable=False, default=0)
    date = Column(Date, nullable=False)
    statut = Column(String(40), nullable=False, default="Partiel")
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())


class Versement(Base):
    """Scheduled installment, joined to payments by passport only."""

    __tablename__ = "versements"

    id = Column(Integer, primary_key=True, index=True)
    passeport = Column(String(20), nullable=False, index=True)
    nom = Column(String(120), nullable=False)
    prenoms = Column(String(160), nullable=True)
    echeance = Column(Date, nullable=False)
    verse = Column(Float, nullable=False, default=0)
    restant = Column(Float, nullable=False, default=0)
    statut = Column(String(40), nullable=False, default="En cours")
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())


class Offre(Base):
    """Travel offer."""

    __tablename__ = "offres"

    id = Column(Integer, primary_key=True, index=True)
    nom = Column(String(160), nullable=False, index=True)
    prix = Column(Float, nullable=False)
    hotel = Column(String(160), nullable=False)
    date_depart = Column(Date, nullable=False)
    date_arrivee = Column(Date, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())


class Voyage(Base):
    """Yearly HAJJ or OUMRAH campaign."""

    __tablename__ = "voyages"

    id = Column(Integer, primary_key=True, index=True)
    nom = Column(String(10), nullable=False)
    annee = Column(Integer, nullable=False)
    offres = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    __table_args__ = (UniqueConstraint("nom", "annee", name="unique_voyage_per_year"),)


class ChatMessage(Base):
    """
    Chat message.

    ``attachments_json`` holds a serialized list of ``{id, name, type, url}``.
    Messages are never hard-deleted: ``deleted_at`` marks them instead.
    """

    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, index=True)
    channel = Column(String(20), nullable=False)
    author_id = Column(Integer, nullable=True)
    author_name = Column(String(120), nullable=True)
    text = Column(Text, nullable=True)
    reply_to_id = Column(Integer, nullable=True)
    attachments_json = Column(Text, nullable=True)
    edited_at = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    __table_args__ = (Index("idx_chat_channel_id", "channel", "id"),)
