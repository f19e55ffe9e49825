from blinker import signal

# ------------------------------------------
# Signals for downstream listeners (push notifications, dashboards)
# ------------------------------------------
attendance_marked     = signal("attendance_marked")
attendance_backfilled = signal("attendance_backfilled")
points_awarded        = signal("points_awarded")
