from app import db


class BaseSeeder:
    priority = 10

    def __init__(self):
        self.db = db

    def run(self):
        raise NotImplementedError("The 'run' method must be implemented by the child class.")

    def seed(self, data):
        """
        Insert a list of model instances and return them with their ids assigned.

        :param data: List of model instances of the same type.
        """
        if not data:
            return []

        model = type(data[0])
        if not all(isinstance(obj, model) for obj in data):
            raise ValueError("All objects must be of the same model.")

        try:
            self.db.session.add_all(data)
            self.db.session.commit()
        except Exception as e:
            self.db.session.rollback()
            raise Exception(f"Failed to insert data into `{model.__tablename__}` table. Error: {e}") from e

        return data
