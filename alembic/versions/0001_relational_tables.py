"""quiz, student and attempt tables keyed by email
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_relational_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "quiz_questions",
        sa.Column("quiz_name", sa.String(), primary_key=True),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("questions", sa.Text(), nullable=False, server_default="[]"),
    )
    op.create_index("ix_quiz_questions_category", "quiz_questions", ["category"])

    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("student_class", sa.String(), nullable=False),
        sa.Column("phone_number", sa.String(), nullable=False),
        sa.Column("sub_exp_date", sa.String(), nullable=True),
        sa.Column("updated_by", sa.String(), nullable=True),
        sa.Column("amount", sa.Float(), nullable=True),
        sa.Column("payment_time", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_students_email", "students", ["email"], unique=True)

    op.create_table(
        "student_quiz_attempts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("quiz_name", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("correct_count", sa.Integer(), nullable=False),
        sa.Column("wrong_count", sa.Integer(), nullable=False),
        sa.Column("skipped_count", sa.Integer(), nullable=False),
        sa.Column("total_count", sa.Integer(), nullable=False),
        sa.Column("percentage", sa.Float(), nullable=False),
        sa.Column("attempt_number", sa.Integer(), nullable=False),
        sa.Column("attempted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("results", sa.Text(), nullable=True),
        sa.UniqueConstraint("email", "quiz_name", name="uq_attempt_email_quiz"),
    )
    op.create_index("ix_student_quiz_attempts_email", "student_quiz_attempts", ["email"])
    op.create_index("ix_student_quiz_attempts_quiz_name", "student_quiz_attempts", ["quiz_name"])


def downgrade():
    op.drop_table("student_quiz_attempts")
    op.drop_table("students")
    op.drop_table("quiz_questions")
