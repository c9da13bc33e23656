"""Initial storefront schema

Revision ID: 001
Revises:
Create Date: 2025-11-20

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

GENRES = (
    'ACTION', 'ADVENTURE', 'RPG', 'STRATEGY', 'PUZZLE', 'PLATFORMER',
    'RACING', 'SIMULATION', 'HORROR', 'ARCADE', 'INDIE', 'CASUAL',
)
PLATFORMS = ('WINDOWS', 'MAC', 'LINUX', 'ANDROID', 'IOS', 'WEB', 'PLAYSTATION', 'XBOX', 'NINTENDO_SWITCH')


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=256), nullable=False),
        sa.Column('password', sa.String(length=256), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_table(
        'user_profile',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=False),
        sa.Column('user_type', sa.Enum('DEVELOPER', 'COMPANY', name='usertype'), nullable=False),
        sa.Column('bio', sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_table(
        'game_record',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=120), nullable=False),
        sa.Column('developer_name', sa.String(length=120), nullable=False),
        sa.Column('developer_id', sa.Integer(), nullable=True),
        sa.Column('short_description', sa.String(length=300), nullable=False),
        sa.Column('full_description', sa.Text(), nullable=False),
        sa.Column('genre', sa.Enum(*GENRES, name='genre'), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('is_free', sa.Boolean(), nullable=False),
        sa.Column('status', sa.Enum('DRAFT', 'PUBLISHED', 'REJECTED', name='gamestatus'), nullable=False),
        sa.Column('visibility', sa.Enum('PUBLIC', 'PRIVATE', 'COMPANIES_ONLY', name='visibility'), nullable=False),
        sa.Column(
            'stage',
            sa.Enum('IDEA', 'PROTOTYPE', 'ALPHA', 'BETA', 'RELEASE', name='developmentstage'),
            nullable=False,
        ),
        sa.Column('looking_for_publisher', sa.Boolean(), nullable=False),
        sa.Column('rating', sa.Float(), nullable=False),
        sa.Column('download_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('price >= 0', name='ck_game_price_non_negative'),
        sa.CheckConstraint('is_free = 0 OR price = 0', name='ck_game_free_has_no_price'),
        sa.CheckConstraint('download_count >= 0', name='ck_game_download_count_non_negative'),
        sa.ForeignKeyConstraint(['developer_id'], ['user.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_game_record_developer_id', 'game_record', ['developer_id'])
    op.create_index('ix_game_record_status', 'game_record', ['status'])
    op.create_index('ix_game_record_created_at', 'game_record', ['created_at'])

    op.create_table(
        'game_platform',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('platform', sa.Enum(*PLATFORMS, name='platform'), nullable=False),
        sa.ForeignKeyConstraint(['game_id'], ['game_record.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('game_id', 'platform', name='uq_game_platform'),
    )
    op.create_index('ix_game_platform_game_id', 'game_platform', ['game_id'])

    op.create_table(
        'game_tag',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.ForeignKeyConstraint(['game_id'], ['game_record.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_game_tag_game_id', 'game_tag', ['game_id'])

    op.create_table(
        'build_record',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('creator_id', sa.Integer(), nullable=True),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=False),
        sa.Column('platform', sa.Enum(*PLATFORMS, name='platform'), nullable=False),
        sa.Column('version', sa.String(length=32), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False),
        sa.Column('storage_file_id', sa.String(length=64), nullable=False),
        sa.CheckConstraint('file_size > 0', name='ck_build_file_size_positive'),
        sa.ForeignKeyConstraint(['game_id'], ['game_record.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['creator_id'], ['user.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('storage_file_id'),
    )
    op.create_index('ix_build_record_game_id', 'build_record', ['game_id'])

    op.create_table(
        'library_entry',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('acquired_at', sa.DateTime(), nullable=False),
        sa.Column('download_count', sa.Integer(), nullable=False),
        sa.Column('last_downloaded_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['game_id'], ['game_record.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'game_id', name='uq_library_user_game'),
    )
    op.create_index('ix_library_entry_user_id', 'library_entry', ['user_id'])


def downgrade():
    op.drop_index('ix_library_entry_user_id', table_name='library_entry')
    op.drop_table('library_entry')
    op.drop_index('ix_build_record_game_id', table_name='build_record')
    op.drop_table('build_record')
    op.drop_index('ix_game_tag_game_id', table_name='game_tag')
    op.drop_table('game_tag')
    op.drop_index('ix_game_platform_game_id', table_name='game_platform')
    op.drop_table('game_platform')
    op.drop_index('ix_game_record_created_at', table_name='game_record')
    op.drop_index('ix_game_record_status', table_name='game_record')
    op.drop_index('ix_game_record_developer_id', table_name='game_record')
    op.drop_table('game_record')
    op.drop_table('user_profile')
    op.drop_table('user')
