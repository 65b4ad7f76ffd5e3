CRD_GROUP = "webapp.example.com"
CRD_VERSION = "v1"
CRD_KIND_APP = "App"
CRD_PLURAL_APP = "apps"

# Value of the "controller" label stamped on every managed child.
CONTROLLER_NAME = "app-controller"
