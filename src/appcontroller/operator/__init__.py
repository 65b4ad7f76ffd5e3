# NOTE: The kopf handlers live in `appcontroller.operator.operator`. Importing
#       that module is what registers them, so `kopf run -m
#       appcontroller.operator.operator`, `python -m appcontroller.operator`
#       and `app-controller run` all go through it.
