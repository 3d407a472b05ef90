# scripts/check_db.py
# Проверяет подключение к DATABASE_URL и наличие таблиц storefront
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from storefront.core.config import settings
from storefront.db.session import engine

EXPECTED_TABLES = {"users", "products", "vouchers", "orders", "order_items", "reviews"}

def main():
    print('Trying to connect to:', settings.DATABASE_URL)
    try:
        with engine.connect() as conn:
            print('Connection OK, SELECT 1 ->', conn.execute(text("SELECT 1")).scalar())
        missing = EXPECTED_TABLES - set(inspect(engine).get_table_names())
        if missing:
            print('Missing tables:', ', '.join(sorted(missing)), '(run `alembic upgrade head`)')
        else:
            print('All tables present')
    except SQLAlchemyError as e:
        print('Connection failed:', e)

if __name__ == '__main__':
    main()
