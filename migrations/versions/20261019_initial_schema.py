"""
Initial MyUMC schema.

Creates tenancy, identity, members, content, events, store and audit tables.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'initial_20261019'
down_revision = None
branch_labels = None
depends_on = None


def _uuid():
    return postgresql.UUID(as_uuid=True)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'organizations',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('name', sa.String(length=200), nullable=False, unique=True),
        sa.Column('slug', sa.String(length=100), nullable=True, unique=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_by', _uuid(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'users',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('email', sa.String(length=256), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('phone_number', sa.String(length=32), nullable=True),
        sa.Column('user_type', sa.String(length=32), nullable=False, server_default='Member'),
        sa.Column('organization_id', _uuid(), sa.ForeignKey('organizations.id', ondelete='SET NULL'), nullable=True),
        sa.Column('profile_picture_url', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('preferred_language', sa.String(length=8), nullable=False, server_default='en'),
        sa.Column('auth_provider', sa.String(length=32), nullable=False, server_default='local'),
        sa.Column('external_subject', sa.String(), nullable=True),
        sa.Column('refresh_token_id', sa.String(length=32), nullable=True),
        sa.Column('refresh_token_hash', sa.String(), nullable=True),
        sa.Column('refresh_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_organization_id', 'users', ['organization_id'])
    op.create_index('ix_users_external_subject', 'users', ['external_subject'])
    op.create_index('ix_users_refresh_token_id', 'users', ['refresh_token_id'])

    # Members
    op.create_table(
        'members',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('organization_id', _uuid(), sa.ForeignKey('organizations.id', ondelete='SET NULL'), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('member_since', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Active'),
        sa.Column('emergency_contact', sa.String(length=200), nullable=True),
        sa.Column('emergency_contact_phone', sa.String(length=32), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_members_organization_id', 'members', ['organization_id'])

    op.create_table(
        'giving_records',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('member_id', _uuid(), sa.ForeignKey('members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('purpose', sa.String(length=200), nullable=True),
        sa.Column('payment_method', sa.String(length=32), nullable=False),
        sa.Column('transaction_reference', sa.String(length=100), nullable=True),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_giving_records_member_id_date', 'giving_records', ['member_id', 'date'])

    op.create_table(
        'membership_history',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('member_id', _uuid(), sa.ForeignKey('members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('previous_church', sa.String(length=200), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_membership_history_member_id', 'membership_history', ['member_id'])

    # Content (single table for sermons, blog posts and announcements)
    op.create_table(
        'content',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('content_type', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.String(length=1000), nullable=True),
        sa.Column('author_id', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('organization_id', _uuid(), sa.ForeignKey('organizations.id', ondelete='SET NULL'), nullable=True),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('tags', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('views', sa.Integer(), nullable=False, server_default='0'),
        # sermon
        sa.Column('video_url', sa.String(), nullable=True),
        sa.Column('audio_url', sa.String(), nullable=True),
        sa.Column('transcript_url', sa.String(), nullable=True),
        sa.Column('duration_seconds', sa.Integer(), nullable=True),
        sa.Column('preacher_name', sa.String(length=200), nullable=True),
        sa.Column('sermon_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('scripture', sa.String(length=200), nullable=True),
        sa.Column('downloads', sa.Integer(), nullable=True),
        sa.Column('rating', sa.Float(), nullable=True),
        # blog post
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column('featured_image_url', sa.String(), nullable=True),
        sa.Column('read_time', sa.Integer(), nullable=True),
        sa.Column('like_count', sa.Integer(), nullable=True),
        # announcement
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('priority', sa.String(length=10), nullable=True),
        sa.Column('priority_rank', sa.Integer(), nullable=True),
        sa.Column('requires_acknowledgement', sa.Boolean(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_content_content_type', 'content', ['content_type'])
    op.create_index('ix_content_organization_id', 'content', ['organization_id'])

    op.create_table(
        'comments',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('content_id', _uuid(), sa.ForeignKey('content.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('text', sa.String(length=2000), nullable=False),
        sa.Column('parent_comment_id', _uuid(), sa.ForeignKey('comments.id', ondelete='CASCADE'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_comments_content_id_created_at', 'comments', ['content_id', 'created_at'])

    op.create_table(
        'sermon_ratings',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('sermon_id', _uuid(), sa.ForeignKey('content.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('review', sa.String(length=1000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='ck_sermon_ratings_rating_range'),
    )
    op.create_index('ix_sermon_ratings_sermon_id', 'sermon_ratings', ['sermon_id'])

    op.create_table(
        'blog_post_likes',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('blog_post_id', _uuid(), sa.ForeignKey('content.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('blog_post_id', 'user_id', name='uq_blog_post_likes_post_user'),
    )

    op.create_table(
        'announcement_acknowledgements',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('announcement_id', _uuid(), sa.ForeignKey('content.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('acknowledged_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('announcement_id', 'user_id', name='uq_announcement_ack_announcement_user'),
    )

    # Events
    op.create_table(
        'church_events',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('organization_id', _uuid(), sa.ForeignKey('organizations.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('location', sa.String(length=500), nullable=True),
        sa.Column('virtual_meeting_url', sa.String(), nullable=True),
        sa.Column('is_virtual', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_recurring', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('recurrence_type', sa.String(length=10), nullable=True),
        sa.Column('recurrence_interval', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('recurrence_days_of_week', postgresql.JSONB(), nullable=True),
        sa.Column('recurrence_end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('recurrence_occurrences', sa.Integer(), nullable=True),
        sa.Column('max_attendees', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('registration_fee', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('registration_deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('requires_registration', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Draft'),
        sa.Column('organizer_id', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_church_events_organization_id_start_date', 'church_events', ['organization_id', 'start_date'])

    op.create_table(
        'event_registrations',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('event_id', _uuid(), sa.ForeignKey('church_events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Pending'),
        sa.Column('registered_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('notes', sa.String(length=1000), nullable=True),
        sa.Column('payment_status', sa.String(length=20), nullable=False, server_default='NotRequired'),
        sa.Column('payment_reference', sa.String(length=100), nullable=True),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_event_registrations_event_user'),
    )

    op.create_table(
        'event_reminders',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('event_id', _uuid(), sa.ForeignKey('church_events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('time_before_event', sa.Integer(), nullable=False),
        sa.Column('reminder_type', sa.String(length=20), nullable=False, server_default='Email'),
        sa.Column('message', sa.String(length=1000), nullable=True),
        sa.Column('sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_event_reminders_event_id', 'event_reminders', ['event_id'])

    # Store
    op.create_table(
        'products',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('organization_id', _uuid(), sa.ForeignKey('organizations.id', ondelete='SET NULL'), nullable=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.String(length=2000), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('stock_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sku', sa.String(length=50), nullable=False, unique=True),
        sa.Column('images', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('sub_category', sa.String(length=100), nullable=True),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_featured', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.CheckConstraint('stock_quantity >= 0', name='ck_products_stock_non_negative'),
    )
    op.create_index('ix_products_organization_id', 'products', ['organization_id'])
    op.create_index('ix_products_category', 'products', ['category'])

    op.create_table(
        'product_variants',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('product_id', _uuid(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('sku', sa.String(length=50), nullable=False, unique=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('stock_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('attributes', postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.CheckConstraint('stock_quantity >= 0', name='ck_product_variants_stock_non_negative'),
    )
    op.create_index('ix_product_variants_product_id', 'product_variants', ['product_id'])

    op.create_table(
        'carts',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_carts_user_id', 'carts', ['user_id'])

    op.create_table(
        'cart_items',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('cart_id', _uuid(), sa.ForeignKey('carts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', _uuid(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('variant_id', _uuid(), sa.ForeignKey('product_variants.id', ondelete='CASCADE'), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_cart_items_quantity_positive'),
    )
    op.create_index('ix_cart_items_cart_id', 'cart_items', ['cart_id'])

    op.create_table(
        'orders',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('order_number', sa.String(length=32), nullable=False, unique=True),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('order_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Pending'),
        sa.Column('subtotal', sa.Numeric(10, 2), nullable=False),
        sa.Column('shipping_cost', sa.Numeric(10, 2), nullable=False),
        sa.Column('tax', sa.Numeric(10, 2), nullable=False),
        sa.Column('total', sa.Numeric(10, 2), nullable=False),
        sa.Column('payment_method', sa.String(length=32), nullable=False),
        sa.Column('payment_reference', sa.String(length=100), nullable=True),
        sa.Column('payment_status', sa.String(length=20), nullable=False, server_default='Pending'),
        sa.Column('shipping_address', sa.Text(), nullable=True),
        sa.Column('billing_address', sa.Text(), nullable=True),
        sa.Column('notes', sa.String(length=1000), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_orders_user_id_order_date', 'orders', ['user_id', 'order_date'])

    op.create_table(
        'order_items',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('order_id', _uuid(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', _uuid(), sa.ForeignKey('products.id', ondelete='SET NULL'), nullable=True),
        sa.Column('variant_id', _uuid(), sa.ForeignKey('product_variants.id', ondelete='SET NULL'), nullable=True),
        sa.Column('product_name', sa.String(length=200), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('total', sa.Numeric(10, 2), nullable=False),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    # Audit trail
    op.create_table(
        'audit_logs',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('organization_id', _uuid(), sa.ForeignKey('organizations.id', ondelete='SET NULL'), nullable=True),
        sa.Column('actor_user_id', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('action_type', sa.Text(), nullable=False),
        sa.Column('target_type', sa.Text(), nullable=True),
        sa.Column('target_id', _uuid(), nullable=True),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('metadata', postgresql.JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_audit_logs_organization_id_created_at', 'audit_logs', ['organization_id', 'created_at'])
    op.create_index('ix_audit_logs_actor_user_id_created_at', 'audit_logs', ['actor_user_id', 'created_at'])
    op.create_index('ix_audit_logs_action_type', 'audit_logs', ['action_type'])
    op.create_index('ix_audit_logs_target', 'audit_logs', ['target_type', 'target_id'])


def downgrade() -> None:
    for table in (
        'audit_logs',
        'order_items',
        'orders',
        'cart_items',
        'carts',
        'product_variants',
        'products',
        'event_reminders',
        'event_registrations',
        'church_events',
        'announcement_acknowledgements',
        'blog_post_likes',
        'sermon_ratings',
        'comments',
        'content',
        'membership_history',
        'giving_records',
        'members',
        'users',
        'organizations',
    ):
        op.drop_table(table)
