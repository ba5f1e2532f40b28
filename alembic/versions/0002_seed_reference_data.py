from alembic import op
import sqlalchemy as sa


revision = "0002_seed_reference_data"
down_revision = "0001_create_bookstore_tables"
branch_labels = None
depends_on = None

categories = sa.table("Categories", sa.column("id", sa.Integer), sa.column("name", sa.String))
authors = sa.table(
    "Authors",
    sa.column("id", sa.Integer),
    sa.column("name", sa.String),
    sa.column("birthday", sa.String),
    sa.column("address", sa.String),
)


def upgrade() -> None:
    op.bulk_insert(
        categories,
        [
            {"id": 1, "name": "Science Fiction"},
            {"id": 2, "name": "Mystery"},
            {"id": 3, "name": "History"},
        ],
    )
    op.bulk_insert(
        authors,
        [
            {"id": 1, "name": "Frank Herbert", "birthday": "1920-10-08", "address": "Tacoma"},
            {"id": 2, "name": "Agatha Christie", "birthday": "1890-09-15", "address": "Torquay"},
            {"id": 3, "name": "Mary Beard", "birthday": None, "address": None},
        ],
    )


def downgrade() -> None:
    op.execute(authors.delete().where(authors.c.id.in_([1, 2, 3])))
    op.execute(categories.delete().where(categories.c.id.in_([1, 2, 3])))
