class BaseService:
    def __init__(self, repository):
        self.repository = repository

    def create(self, **kwargs):
        return self.repository.create(**kwargs)

    def count(self) -> int:
        return self.repository.count()

    def get_by_id(self, id):
        return self.repository.get_by_id(id)

    def get_or_404(self, id):
        return self.repository.get_or_404(id)

    def update(self, id, **kwargs):
        return self.repository.update(id, **kwargs)

    def delete(self, id):
        return self.repository.delete(id)
