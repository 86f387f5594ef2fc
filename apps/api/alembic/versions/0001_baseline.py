"""Baseline migration - tenants, residents, care files, jobs, incidents

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-18

Creates every table of the care home schema.
"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""

    op.execute('CREATE EXTENSION IF NOT EXISTS pgcrypto')  # For gen_random_uuid()

    # ==========================================================================
    # Organizations, users, memberships
    # ==========================================================================
    op.execute('''
        CREATE TABLE organizations (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name VARCHAR(255) NOT NULL,
            slug VARCHAR(100) UNIQUE NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')

    op.execute('''
        CREATE TABLE users (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            email VARCHAR(255) UNIQUE NOT NULL,
            display_name VARCHAR(255) NOT NULL,
            token_version INTEGER NOT NULL DEFAULT 1,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')

    op.execute('''
        CREATE TABLE memberships (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID UNIQUE NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            organization_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            role VARCHAR(50) NOT NULL,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_memberships_org_id ON memberships(organization_id)')

    # ==========================================================================
    # Residents
    # ==========================================================================
    op.execute('''
        CREATE TABLE residents (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            organization_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            team_id VARCHAR(100) NOT NULL,
            first_name VARCHAR(100) NOT NULL,
            last_name VARCHAR(100) NOT NULL,
            date_of_birth DATE NOT NULL,
            room_number VARCHAR(20),
            admission_date DATE,
            nhs_health_number VARCHAR(20),
            phone_number VARCHAR(50),
            gp_name VARCHAR(255),
            gp_address TEXT,
            gp_phone VARCHAR(50),
            care_manager_name VARCHAR(255),
            care_manager_address TEXT,
            care_manager_phone VARCHAR(50),
            allergies TEXT,
            medical_conditions TEXT,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_by VARCHAR(100) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_residents_org_team ON residents(organization_id, team_id)')
    op.execute('CREATE INDEX idx_residents_org_active ON residents(organization_id, is_active)')

    # ==========================================================================
    # Care file records (all form kinds)
    # ==========================================================================
    op.execute('''
        CREATE TABLE care_file_records (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            form_kind VARCHAR(50) NOT NULL,
            resident_id UUID NOT NULL REFERENCES residents(id) ON DELETE CASCADE,
            organization_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            team_id VARCHAR(100) NOT NULL,
            version INTEGER NOT NULL,
            previous_version_id UUID,
            payload JSONB NOT NULL DEFAULT '{}'::jsonb,
            status VARCHAR(20),
            submitted_at TIMESTAMPTZ,
            reviewed_at TIMESTAMPTZ,
            reviewed_by VARCHAR(100),
            created_by VARCHAR(100) NOT NULL,
            last_modified_by VARCHAR(100) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            last_modified_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            pdf_status VARCHAR(20),
            pdf_error TEXT,
            pdf_file_id VARCHAR(255),
            pdf_generated_at TIMESTAMPTZ,
            CONSTRAINT uq_care_file_records_version UNIQUE (resident_id, form_kind, version)
        )
    ''')
    op.execute('''
        CREATE INDEX idx_care_file_records_resident
        ON care_file_records(resident_id, form_kind, version)
    ''')
    op.execute('''
        CREATE INDEX idx_care_file_records_org
        ON care_file_records(organization_id, created_at)
    ''')
    op.execute('''
        CREATE UNIQUE INDEX uq_care_file_records_one_draft
        ON care_file_records(resident_id, form_kind)
        WHERE status = 'draft'
    ''')

    # ==========================================================================
    # Jobs
    # ==========================================================================
    op.execute('''
        CREATE TABLE jobs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            organization_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            job_type VARCHAR(50) NOT NULL,
            payload JSONB NOT NULL DEFAULT '{}'::jsonb,
            run_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            status VARCHAR(20) NOT NULL DEFAULT 'pending',
            attempts INTEGER NOT NULL DEFAULT 0,
            max_attempts INTEGER NOT NULL DEFAULT 3,
            last_error TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            completed_at TIMESTAMPTZ
        )
    ''')
    op.execute("CREATE INDEX idx_jobs_pending ON jobs(status, run_at) WHERE status = 'pending'")
    op.execute('CREATE INDEX idx_jobs_org ON jobs(organization_id, created_at)')

    # ==========================================================================
    # Incidents and trust reports
    # ==========================================================================
    op.execute('''
        CREATE TABLE incidents (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            organization_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            team_id VARCHAR(100) NOT NULL,
            resident_id UUID REFERENCES residents(id) ON DELETE SET NULL,
            home_name VARCHAR(255) NOT NULL,
            unit VARCHAR(100),
            incident_date DATE NOT NULL,
            incident_time VARCHAR(10) NOT NULL,
            incident_level VARCHAR(30) NOT NULL,
            incident_types JSONB NOT NULL DEFAULT '[]'::jsonb,
            payload JSONB NOT NULL DEFAULT '{}'::jsonb,
            created_by VARCHAR(100) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_incidents_org_date ON incidents(organization_id, incident_date)')
    op.execute('CREATE INDEX idx_incidents_resident ON incidents(resident_id, incident_date)')
    op.execute('CREATE INDEX idx_incidents_home ON incidents(organization_id, home_name)')

    op.execute('''
        CREATE TABLE trust_reports (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            incident_id UUID NOT NULL REFERENCES incidents(id) ON DELETE CASCADE,
            resident_id UUID NOT NULL REFERENCES residents(id) ON DELETE CASCADE,
            organization_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            team_id VARCHAR(100) NOT NULL,
            trust_name VARCHAR(20) NOT NULL,
            trust_full_name VARCHAR(255) NOT NULL,
            report_data JSONB NOT NULL DEFAULT '{}'::jsonb,
            status VARCHAR(20) NOT NULL,
            reference_number VARCHAR(100),
            submitted_at TIMESTAMPTZ,
            submitted_by VARCHAR(100),
            created_by VARCHAR(100) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_trust_reports_incident ON trust_reports(incident_id)')
    op.execute('CREATE INDEX idx_trust_reports_org_status ON trust_reports(organization_id, status)')


def downgrade() -> None:
    """Drop all tables."""
    for table in (
        'trust_reports',
        'incidents',
        'jobs',
        'care_file_records',
        'residents',
        'memberships',
        'users',
        'organizations',
    ):
        op.execute(f'DROP TABLE IF EXISTS {table} CASCADE')
