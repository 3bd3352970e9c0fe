"""
Per-distribution package data.

Package groups, service names and config locations for each supported
package manager. Services look everything distro-specific up here.
"""

from __future__ import annotations

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}

PACKAGE_GROUPS: dict[str, dict[str, list[str]]] = {
    "apt": {
        "php": [
            "php-cli", "php-mbstring", "php-intl", "php-curl", "php-xml",
            "php-zip", "php-gd", "php-bz2", "php-redis", "php-mysql",
        ],
        "redis": ["redis-server"],
        "supervisor": ["supervisor"],
        "mysql": ["mariadb-server"],
        "apache": ["apache2", "libapache2-mod-php"],
        "nginx": ["nginx", "php-fpm"],
    },
    "dnf": {
        "php": [
            "php-cli", "php-mbstring", "php-intl", "php-xml", "php-process",
            "php-gd", "php-pecl-zip", "php-pecl-redis5", "php-mysqlnd",
        ],
        "redis": ["redis"],
        "supervisor": ["supervisor"],
        "mysql": ["mariadb-server"],
        "apache": ["httpd", "php"],
        "nginx": ["nginx", "php-fpm"],
    },
}
PACKAGE_GROUPS["yum"] = PACKAGE_GROUPS["dnf"]

# PHP's MySQL driver, installed ahead of the database step.
DATABASE_DRIVER = {"apt": "php-mysql", "dnf": "php-mysqlnd", "yum": "php-mysqlnd"}

SERVICES: dict[str, dict[str, str]] = {
    "apt": {
        "mysql": "mariadb",
        "redis": "redis-server",
        "supervisor": "supervisor",
        "apache": "apache2",
        "nginx": "nginx",
        "php-fpm": "php-fpm",
    },
    "dnf": {
        "mysql": "mariadb",
        "redis": "redis",
        "supervisor": "supervisord",
        "apache": "httpd",
        "nginx": "nginx",
        "php-fpm": "php-fpm",
    },
}
SERVICES["yum"] = SERVICES["dnf"]

PATHS: dict[str, dict[str, str]] = {
    "apt": {
        "supervisor_conf": "/etc/supervisor/conf.d/seat.conf",
        "apache_site": "/etc/apache2/sites-available/seat.conf",
        "apache_security": "/etc/apache2/conf-available/seat-security.conf",
        "nginx_site": "/etc/nginx/sites-available/seat",
        "nginx_enabled": "/etc/nginx/sites-enabled/seat",
        "nginx_security": "/etc/nginx/conf.d/seat-security.conf",
        "php_fpm_socket": "/run/php/php-fpm.sock",
        "mysql_conf": "/etc/mysql/mariadb.conf.d/99-seat.cnf",
    },
    "dnf": {
        "supervisor_conf": "/etc/supervisord.d/seat.ini",
        "apache_site": "/etc/httpd/conf.d/seat.conf",
        "apache_security": "/etc/httpd/conf.d/seat-security.conf",
        "nginx_site": "/etc/nginx/conf.d/seat.conf",
        "nginx_enabled": "",
        "nginx_security": "/etc/nginx/conf.d/seat-security.conf",
        "php_fpm_socket": "/run/php-fpm/www.sock",
        "mysql_conf": "/etc/my.cnf.d/99-seat.cnf",
    },
}
PATHS["yum"] = PATHS["dnf"]

WEB_USER = {"apt": "www-data", "dnf": "apache", "yum": "apache"}
