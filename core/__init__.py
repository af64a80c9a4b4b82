# ============================================================================
# CORE MODULE
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Core module initialization
# PURPOSE: Shared configuration and logging
# LAST_REVIEWED: 17 OCT 2026
# ============================================================================
