# The offline builder imports this package; keep settings out of it.
from staff_relay.core.identifiers import derive_identifier, normalize_name
from staff_relay.core.exceptions import DirectoryError, DispatchError, RelayError
