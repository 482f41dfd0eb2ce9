from modulekit import define_capability

CAPABILITY = define_capability(lambda logger: logger.child("ai"))
