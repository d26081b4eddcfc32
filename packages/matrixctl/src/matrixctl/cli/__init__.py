"""matrixctl command line interface."""
