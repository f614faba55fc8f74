"""Create evidence upload, analysis job and extraction result tables

Revision ID: 3f9a1c7d2e10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3f9a1c7d2e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at(name: str = 'created_at') -> sa.Column:
    return sa.Column(name, sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False)


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table('evidence_uploads',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('case_id', sa.UUID(), nullable=True),
        sa.Column('file_name', sa.String(), nullable=False),
        sa.Column('file_type', sa.String(), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('storage_path', sa.String(), nullable=False, comment='Object path inside the evidence bucket'),
        sa.Column('public_url', sa.String(), nullable=False),
        sa.Column('category', sa.String(), nullable=True, comment='Evidence category, used as document type on re-analysis'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('related_event_ids', postgresql.ARRAY(sa.String()), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_evidence_uploads_case_id', 'evidence_uploads', ['case_id'])

    op.create_table('document_analysis_jobs',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('upload_id', sa.UUID(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, comment='processing | completed | failed'),
        sa.Column('events_extracted', sa.Integer(), nullable=True),
        sa.Column('entities_extracted', sa.Integer(), nullable=True),
        sa.Column('discrepancies_extracted', sa.Integer(), nullable=True),
        sa.Column('claims_extracted', sa.Integer(), nullable=True),
        sa.Column('compliance_violations_extracted', sa.Integer(), nullable=True),
        sa.Column('financial_harm_extracted', sa.Integer(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('started_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('completed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['upload_id'], ['evidence_uploads.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('extracted_events',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('case_id', sa.UUID(), nullable=True),
        sa.Column('source_upload_id', sa.UUID(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('individuals', sa.Text(), nullable=False),
        sa.Column('legal_action', sa.Text(), nullable=False),
        sa.Column('outcome', sa.Text(), nullable=False),
        sa.Column('evidence_discrepancy', sa.Text(), nullable=False),
        sa.Column('sources', sa.Text(), nullable=False),
        sa.Column('confidence_score', sa.Float(), nullable=True),
        sa.Column('is_approved', sa.Boolean(), nullable=True),
        sa.Column('is_hidden', sa.Boolean(), nullable=True),
        sa.Column('extraction_method', sa.String(), nullable=True),
        _created_at(),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_extracted_events_case_id', 'extracted_events', ['case_id'])

    op.create_table('extracted_entities',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('case_id', sa.UUID(), nullable=True),
        sa.Column('source_upload_id', sa.UUID(), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('entity_type', sa.String(), nullable=False),
        sa.Column('role', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_extracted_entities_case_id', 'extracted_entities', ['case_id'])

    op.create_table('extracted_discrepancies',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('case_id', sa.UUID(), nullable=True),
        sa.Column('source_upload_id', sa.UUID(), nullable=True),
        sa.Column('discrepancy_type', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('severity', sa.String(), nullable=False),
        sa.Column('legal_reference', sa.Text(), nullable=True),
        sa.Column('related_dates', postgresql.ARRAY(sa.String()), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_extracted_discrepancies_case_id', 'extracted_discrepancies', ['case_id'])

    op.create_table('legal_claims',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('case_id', sa.UUID(), nullable=True),
        sa.Column('source_upload_id', sa.UUID(), nullable=True),
        sa.Column('allegation_text', sa.Text(), nullable=False),
        sa.Column('claim_type', sa.String(), nullable=False),
        sa.Column('legal_framework', sa.String(), nullable=False),
        sa.Column('legal_section', sa.String(), nullable=False),
        sa.Column('alleged_by', sa.String(), nullable=True),
        sa.Column('alleged_against', sa.String(), nullable=True),
        sa.Column('date_alleged', sa.Date(), nullable=True),
        sa.Column('source_document', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=True, comment='unverified until evidence is correlated'),
        sa.Column('support_score', sa.Float(), nullable=True),
        _created_at(),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_legal_claims_case_id', 'legal_claims', ['case_id'])

    op.create_table('compliance_violations',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('case_id', sa.UUID(), nullable=True),
        sa.Column('violation_type', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('severity', sa.String(), nullable=False),
        sa.Column('legal_consequence', sa.Text(), nullable=True),
        sa.Column('remediation_possible', sa.Boolean(), nullable=True),
        sa.Column('resolved', sa.Boolean(), nullable=True),
        sa.Column('resolution_notes', sa.Text(), nullable=True),
        _created_at('flagged_at'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_compliance_violations_case_id', 'compliance_violations', ['case_id'])

    op.create_table('regulatory_harm_incidents',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('case_id', sa.UUID(), nullable=True),
        sa.Column('incident_type', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('incident_date', sa.Date(), nullable=True),
        sa.Column('institution_name', sa.String(), nullable=True),
        sa.Column('institution_type', sa.String(), nullable=True),
        sa.Column('severity', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        _created_at(),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_regulatory_harm_incidents_case_id', 'regulatory_harm_incidents', ['case_id'])

    op.create_table('financial_losses',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('case_id', sa.UUID(), nullable=True),
        sa.Column('incident_id', sa.UUID(), nullable=False),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('currency', sa.String(), nullable=True),
        sa.Column('loss_category', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('is_documented', sa.Boolean(), nullable=True),
        sa.Column('is_estimated', sa.Boolean(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['incident_id'], ['regulatory_harm_incidents.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_financial_losses_case_id', 'financial_losses', ['case_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('financial_losses')
    op.drop_table('regulatory_harm_incidents')
    op.drop_table('compliance_violations')
    op.drop_table('legal_claims')
    op.drop_table('extracted_discrepancies')
    op.drop_table('extracted_entities')
    op.drop_table('extracted_events')
    op.drop_table('document_analysis_jobs')
    op.drop_table('evidence_uploads')
