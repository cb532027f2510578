"""Domain layer: exceptions, enums and permission grant types. No I/O."""
