"""arcdesk: a desktop chat workbench composed of kernel-managed modules."""
