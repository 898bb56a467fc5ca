from models.db_storage import DBStorage

# bound to a database by api.create_app() (storage.reload)
storage = DBStorage()
