"""Initial schema: accounts, pilgrims, medical forms, flights, rooms,
payments, installments, offers, voyages and chat messages.
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('email', sa.String(160), nullable=False, unique=True, index=True),
        sa.Column('password_hash', sa.String(200), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='Agent'),
        sa.Column('last_login_at', sa.DateTime, nullable=True),
        *timestamps(),
    )

    op.create_table(
        'pelerins',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('photo_pelerin_path', sa.String(512), nullable=True),
        sa.Column('photo_passeport_path', sa.String(512), nullable=True),
        sa.Column('nom', sa.String(120), nullable=False),
        sa.Column('prenoms', sa.String(160), nullable=False),
        sa.Column('date_naissance', sa.Date, nullable=False),
        sa.Column('lieu_naissance', sa.String(160), nullable=True),
        sa.Column('sexe', sa.String(1), nullable=False),
        sa.Column('adresse', sa.String(255), nullable=True),
        sa.Column('contact', sa.String(60), nullable=False),
        sa.Column('num_passeport', sa.String(20), nullable=False, index=True),
        sa.Column('offre', sa.String(160), nullable=True),
        sa.Column('voyage', sa.String(20), nullable=True),
        sa.Column('annee_voyage', sa.Integer, nullable=False),
        sa.Column('ur_nom', sa.String(120), nullable=True),
        sa.Column('ur_prenoms', sa.String(160), nullable=True),
        sa.Column('ur_contact', sa.String(60), nullable=True),
        sa.Column('ur_residence', sa.String(255), nullable=True),
        sa.Column('created_by_name', sa.String(120), nullable=True),
        sa.Column('created_by_id', sa.Integer, nullable=True),
        *timestamps(),
    )
    op.create_index('idx_pelerins_name', 'pelerins', ['nom', 'prenoms'])

    op.create_table(
        'medicales',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('numero_cmah', sa.String(60), nullable=True),
        sa.Column('passeport', sa.String(20), nullable=False, index=True),
        sa.Column('nom', sa.String(120), nullable=True),
        sa.Column('prenoms', sa.String(160), nullable=True),
        sa.Column('pouls', sa.String(30), nullable=True),
        sa.Column('carnet_vaccins', sa.String(60), nullable=True),
        sa.Column('groupe_sanguin', sa.String(10), nullable=True),
        sa.Column('covid', sa.String(60), nullable=True),
        sa.Column('poids', sa.String(30), nullable=True),
        sa.Column('tension', sa.String(30), nullable=True),
        sa.Column('vulnerabilite', sa.String(255), nullable=True),
        sa.Column('diabete', sa.String(60), nullable=True),
        sa.Column('maladie_cardiaque', sa.String(60), nullable=True),
        sa.Column('analyse_psychiatrique', sa.String(255), nullable=True),
        sa.Column('accompagnements', sa.String(255), nullable=True),
        sa.Column('examen_paraclinique', sa.Text, nullable=True),
        sa.Column('antecedents', sa.Text, nullable=True),
        sa.Column('pelerin_id', sa.Integer, nullable=True, index=True),
        *timestamps(),
    )

    op.create_table(
        'flights',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('code', sa.String(20), nullable=False),
        sa.Column('company', sa.String(120), nullable=False),
        sa.Column('from_code', sa.String(3), nullable=False),
        sa.Column('from_date', sa.DateTime, nullable=False),
        sa.Column('to_code', sa.String(3), nullable=False),
        sa.Column('to_date', sa.DateTime, nullable=False),
        sa.Column('duration', sa.String(40), nullable=True),
        *timestamps(),
    )

    op.create_table(
        'passengers',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('fullname', sa.String(200), nullable=False),
        sa.Column('seat', sa.String(10), nullable=True),
        sa.Column('passport', sa.String(20), nullable=True, index=True),
        sa.Column('photo_url', sa.String(512), nullable=True),
        sa.Column('flight_id', sa.Integer, sa.ForeignKey('flights.id'), nullable=False, index=True),
        *timestamps(),
        sa.UniqueConstraint('flight_id', 'seat', name='unique_seat_per_flight'),
    )

    op.create_table(
        'rooms',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('hotel', sa.String(160), nullable=False),
        sa.Column('city', sa.String(120), nullable=False),
        sa.Column('type', sa.String(40), nullable=False, server_default='double'),
        sa.Column('capacity', sa.Integer, nullable=False, server_default=sa.text('1')),
        *timestamps(),
    )

    op.create_table(
        'room_occupants',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('passport', sa.String(20), nullable=True, index=True),
        sa.Column('photo_url', sa.String(512), nullable=True),
        sa.Column('room_id', sa.Integer, sa.ForeignKey('rooms.id'), nullable=False, index=True),
        *timestamps(),
    )

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('ref', sa.String(20), nullable=False, unique=True),
        sa.Column('passeport', sa.String(20), nullable=False, index=True),
        sa.Column('nom', sa.String(120), nullable=False),
        sa.Column('prenoms', sa.String(160), nullable=True),
        sa.Column('mode', sa.String(40), nullable=False),
        sa.Column('montant', sa.Float, nullable=False, server_default=sa.text('0')),
        sa.Column('total_du', sa.Float, nullable=False, server_default=sa.text('0')),
        sa.Column('reduction', sa.Float, nullable=False, server_default=sa.text('0')),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('statut', sa.String(40), nullable=False),
        *timestamps(),
    )

    op.create_table(
        'versements',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('passeport', sa.String(20), nullable=False, index=True),
        sa.Column('nom', sa.String(120), nullable=False),
        sa.Column('prenoms', sa.String(160), nullable=True),
        sa.Column('echeance', sa.Date, nullable=False),
        sa.Column('verse', sa.Float, nullable=False, server_default=sa.text('0')),
        sa.Column('restant', sa.Float, nullable=False, server_default=sa.text('0')),
        sa.Column('statut', sa.String(40), nullable=False),
        *timestamps(),
    )

    op.create_table(
        'offres',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('nom', sa.String(160), nullable=False, index=True),
        sa.Column('prix', sa.Float, nullable=False),
        sa.Column('hotel', sa.String(160), nullable=False),
        sa.Column('date_depart', sa.Date, nullable=False),
        sa.Column('date_arrivee', sa.Date, nullable=False),
        *timestamps(),
    )

    op.create_table(
        'voyages',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('nom', sa.String(10), nullable=False),
        sa.Column('annee', sa.Integer, nullable=False),
        sa.Column('offres', sa.Text, nullable=True),
        *timestamps(),
        sa.UniqueConstraint('nom', 'annee', name='unique_voyage_per_year'),
    )

    op.create_table(
        'chat_messages',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('channel', sa.String(20), nullable=False),
        sa.Column('author_id', sa.Integer, nullable=True),
        sa.Column('author_name', sa.String(120), nullable=True),
        sa.Column('text', sa.Text, nullable=True),
        sa.Column('reply_to_id', sa.Integer, nullable=True),
        sa.Column('attachments_json', sa.Text, nullable=True),
        sa.Column('edited_at', sa.DateTime, nullable=True),
        sa.Column('deleted_at', sa.DateTime, nullable=True),
        *timestamps(),
    )
    op.create_index('idx_chat_channel_id', 'chat_messages', ['channel', 'id'])


def downgrade():
    op.drop_index('idx_chat_channel_id', table_name='chat_messages')
    op.drop_table('chat_messages')
    op.drop_table('voyages')
    op.drop_table('offres')
    op.drop_table('versements')
    op.drop_table('payments')
    op.drop_table('room_occupants')
    op.drop_table('rooms')
    op.drop_table('passengers')
    op.drop_table('flights')
    op.drop_table('medicales')
    op.drop_index('idx_pelerins_name', table_name='pelerins')
    op.drop_table('pelerins')
    op.drop_table('users')
