# Request and response data transfer objects.
