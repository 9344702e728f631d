##############################################################
#
# errors.py
#
##############################################################


class BootstrapInputError(ValueError):
  """Raised when the bootstrap stack cannot be built from its inputs."""
