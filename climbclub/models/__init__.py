from .document import Document
from .credential import Credential
