# # Copyright (c) 2024 LDAP Reader
# # SPDX-License-Identifier: MIT
# #
# # LDAP Reader
# # Paged search client for LDAP directory services

"""Configuration models and loader for LDAP Reader."""
