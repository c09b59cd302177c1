"""Create B2B gateway tables

Revision ID: 0001_b2b_schema
Revises:
Create Date: 2024-06-01 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_b2b_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('b2b_clients',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('company_name', sa.String(255), nullable=False),
        sa.Column('client_type', sa.String(32), nullable=False),
        sa.Column('contact_name', sa.String(255), nullable=True),
        sa.Column('contact_email', sa.String(255), nullable=True),
        sa.Column('contact_phone', sa.String(64), nullable=True),
        sa.Column('tier', sa.String(32), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('credits_balance', sa.Integer(), nullable=False),
        sa.Column('lifetime_credits_used', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('credits_balance >= 0', name='ck_b2b_clients_credits_nonnegative'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('b2b_api_keys',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('client_id', sa.String(36), sa.ForeignKey('b2b_clients.id'), nullable=False),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('key_prefix', sa.String(8), nullable=False),
        sa.Column('key_hash', sa.String(128), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('allowed_endpoints', sa.JSON(), nullable=False),
        sa.Column('rate_limit_per_minute', sa.Integer(), nullable=True),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_b2b_api_keys_client_id', 'b2b_api_keys', ['client_id'])
    op.create_index('ix_b2b_api_keys_key_prefix', 'b2b_api_keys', ['key_prefix'])

    op.create_table('b2b_leads',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('lead_source', sa.String(64), nullable=False),
        sa.Column('property_type', sa.String(64), nullable=True),
        sa.Column('property_location', sa.String(255), nullable=True),
        sa.Column('lead_intent', sa.String(32), nullable=True),
        sa.Column('lead_budget', sa.BigInteger(), nullable=True),
        sa.Column('lead_score', sa.Integer(), nullable=False),
        sa.Column('contact_name', sa.String(255), nullable=True),
        sa.Column('contact_email', sa.String(255), nullable=True),
        sa.Column('contact_phone', sa.String(64), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_sold', sa.Boolean(), nullable=False),
        sa.Column('sold_to', sa.String(36), sa.ForeignKey('b2b_clients.id'), nullable=True),
        sa.Column('sold_price', sa.Integer(), nullable=True),
        sa.Column('sold_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_b2b_leads_property_location', 'b2b_leads', ['property_location'])
    op.create_index('ix_b2b_leads_lead_score', 'b2b_leads', ['lead_score'])
    op.create_index('ix_b2b_leads_is_sold', 'b2b_leads', ['is_sold'])

    op.create_table('b2b_lead_purchases',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('lead_id', sa.String(36), sa.ForeignKey('b2b_leads.id'), nullable=False),
        sa.Column('client_id', sa.String(36), sa.ForeignKey('b2b_clients.id'), nullable=False),
        sa.Column('credits_spent', sa.Integer(), nullable=False),
        sa.Column('lead_snapshot', sa.JSON(), nullable=False),
        sa.Column('purchased_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('lead_id')
    )
    op.create_index('ix_b2b_lead_purchases_client_id', 'b2b_lead_purchases', ['client_id'])

    op.create_table('b2b_credit_transactions',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('client_id', sa.String(36), sa.ForeignKey('b2b_clients.id'), nullable=False),
        sa.Column('transaction_type', sa.String(32), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('balance_after', sa.Integer(), nullable=False),
        sa.Column('reference_type', sa.String(64), nullable=True),
        sa.Column('reference_id', sa.String(64), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_b2b_credit_transactions_client_id', 'b2b_credit_transactions', ['client_id'])
    op.create_index('ix_b2b_credit_transactions_created_at', 'b2b_credit_transactions', ['created_at'])

    op.create_table('b2b_credit_packages',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('credits', sa.Integer(), nullable=False),
        sa.Column('bonus_credits', sa.Integer(), nullable=False),
        sa.Column('price_idr', sa.Integer(), nullable=False),
        sa.Column('price_usd', sa.Numeric(10, 2), nullable=False),
        sa.Column('is_featured', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('b2b_api_usage',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('client_id', sa.String(36), sa.ForeignKey('b2b_clients.id'), nullable=False),
        sa.Column('api_key_id', sa.String(36), sa.ForeignKey('b2b_api_keys.id'), nullable=True),
        sa.Column('endpoint', sa.String(64), nullable=False),
        sa.Column('method', sa.String(10), nullable=False),
        sa.Column('request_params', sa.JSON(), nullable=True),
        sa.Column('response_status', sa.Integer(), nullable=False),
        sa.Column('credits_used', sa.Integer(), nullable=False),
        sa.Column('response_time_ms', sa.Integer(), nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_b2b_api_usage_client_id', 'b2b_api_usage', ['client_id'])
    op.create_index('ix_b2b_api_usage_api_key_id', 'b2b_api_usage', ['api_key_id'])
    op.create_index('ix_b2b_api_usage_endpoint', 'b2b_api_usage', ['endpoint'])
    op.create_index('ix_b2b_api_usage_response_status', 'b2b_api_usage', ['response_status'])
    op.create_index('ix_b2b_api_usage_created_at', 'b2b_api_usage', ['created_at'])

    op.create_table('b2b_market_insights',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('region', sa.String(128), nullable=False),
        sa.Column('insight_type', sa.String(64), nullable=False),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('period', sa.String(32), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_b2b_market_insights_region', 'b2b_market_insights', ['region'])
    op.create_index('ix_b2b_market_insights_insight_type', 'b2b_market_insights', ['insight_type'])
    op.create_index('ix_b2b_market_insights_created_at', 'b2b_market_insights', ['created_at'])

    op.create_table('property_valuations',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('property_id', sa.String(64), nullable=False),
        sa.Column('estimated_value', sa.BigInteger(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('confidence_score', sa.Float(), nullable=True),
        sa.Column('valuation_method', sa.String(64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_property_valuations_property_id', 'property_valuations', ['property_id'])
    op.create_index('ix_property_valuations_created_at', 'property_valuations', ['created_at'])

    op.create_table('admin_audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('actor', sa.String(255), nullable=False),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('target', sa.String(255), nullable=False),
        sa.Column('before_value', sa.Text(), nullable=True),
        sa.Column('after_value', sa.Text(), nullable=True),
        sa.Column('client_ip', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.String(500), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_admin_audit_logs_timestamp', 'admin_audit_logs', ['timestamp'])
    op.create_index('ix_admin_audit_logs_actor', 'admin_audit_logs', ['actor'])
    op.create_index('ix_admin_audit_logs_action', 'admin_audit_logs', ['action'])


def downgrade():
    op.drop_table('admin_audit_logs')
    op.drop_table('property_valuations')
    op.drop_table('b2b_market_insights')
    op.drop_table('b2b_api_usage')
    op.drop_table('b2b_credit_packages')
    op.drop_table('b2b_credit_transactions')
    op.drop_table('b2b_lead_purchases')
    op.drop_table('b2b_leads')
    op.drop_table('b2b_api_keys')
    op.drop_table('b2b_clients')
