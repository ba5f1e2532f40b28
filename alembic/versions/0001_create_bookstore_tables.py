from alembic import op
import sqlalchemy as sa


revision = "0001_create_bookstore_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "Categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
    )
    op.create_table(
        "Authors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("birthday", sa.String(length=50), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
    )
    op.create_table(
        "Books",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("author_id", sa.Integer(), nullable=True),
        sa.Column("reg_date", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("del_flg", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_table(
        "BookDetails",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("book_id", sa.Integer(), sa.ForeignKey("Books.id"), nullable=False, unique=True),
        sa.Column("price", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("comment", sa.String(length=1000), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("BookDetails")
    op.drop_table("Books")
    op.drop_table("Authors")
    op.drop_table("Categories")
