# Route providers shipped with the server
