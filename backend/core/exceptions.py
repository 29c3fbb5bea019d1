class DispatchError(Exception):
    """
    Raised by the service layer when an operation on shipments, trips or
    branch items cannot be carried out. Views turn it into a 400 response.
    """

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field

    def as_response_data(self):
        data = {'error': self.message}
        if self.field:
            data['field'] = self.field
        return data
