"""document collections for the uid keyed generation
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0002_add_documents_table'
down_revision = '0001_relational_tables'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    if "documents" in inspector.get_table_names():
        return
    op.create_table(
        "documents",
        sa.Column("collection", sa.String(), primary_key=True),
        sa.Column("partition_key", sa.String(), primary_key=True),
        sa.Column("sort_key", sa.String(), primary_key=True, server_default=""),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade():
    op.drop_table("documents")
